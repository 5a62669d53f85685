[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fooddlv"
version = "0.1.0"
description = "Food delivery backend on Flask and SQLite: notes, user registration, image uploads, an in-memory pub/sub hub and retrying jobs"
requires-python = ">=3.10"
keywords = ["food delivery", "flask", "sqlite", "pubsub", "jobs", "rest api"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Application",
]
dependencies = [
    "flask",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
fooddlv = "fooddlv.app:main"

[tool.hatch.build.targets.wheel]
packages = ["fooddlv"]

[tool.pytest.ini_options]
addopts = "-ra"
