# fooddlv

A small food-delivery backend built on Flask, storing its data in SQLite.
It serves notes, user registration and image uploads over HTTP, and
publishes an event on an in-memory hub whenever a note is created; a
consumer engine runs a group of retrying jobs for each such event.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Running the server

```
fooddlv
```

Options:

- `--host` – address to listen on (default `0.0.0.0`).
- `--port` – port to listen on (default: the `PORT` environment variable,
  else `8080`).
- `--database` – SQLite database file (default: the `DBConnStr`
  environment variable, else `fooddlv.db`). The `users`, `notes` and
  `images` tables are created if they are missing.

The command starts a `ConsumerEngine` for note-created events, serves the
application, and stops the engine on exit.

## Endpoints

| Method | Path                  | Purpose                                        |
|--------|-----------------------|------------------------------------------------|
| GET    | `/ping`               | health check, answers `{"message": "pong"}`    |
| GET    | `/v1/notes`           | one page of notes (`page`, `limit` query args) |
| POST   | `/v1/notes`           | create a note                                  |
| GET    | `/v1/notes/<note-id>` | answers the text `Hello <note-id>`             |
| DELETE | `/v1/notes/<note-id>` | soft-delete an active note (status set to 0)   |
| POST   | `/v1/auth/register`   | register a user                                |
| POST   | `/v1/upload`          | upload image files (multipart field `files`)   |
| GET    | `/v1/file/<name>`     | serve a file from the `public` directory       |

Details:

- Listing fills in paging defaults (page 1, limit 50); `paging.total` is
  the number of active notes.
- Creating a note takes `title`, `content` and `image_ids`. Images are
  looked up through `FakeImageStore`, which always answers with the same
  two images, so `image_ids` must hold exactly two ids.
- Registration takes `email` and `password` (both required) and optionally
  `first_name`, `last_name`, `phone`, `role` (`user` or `admin`) and
  `avatar`. The password is stored as the MD5 hex digest of the password
  followed by a random 50-character alphanumeric salt. A second
  registration with the same e-mail is refused.
- Uploads accept `.jpg`, `.jpeg`, `.png`, `.ico`, `.svg`, `.bmp` and `.gif`
  files, save them to `public/` under the working directory (files already
  there are not overwritten), record them in the `images` table and answer
  with their ids.

Successful responses are wrapped as `{"data": ...}`, with `paging` and
`filter` added for listings. Errors are JSON objects with `status_code`,
`message`, `log` and `error_key`.

## Using the application in code

```python
from fooddlv.appctx import AppContext
from fooddlv.app import create_app

with AppContext() as app_ctx:          # in-memory SQLite database
    client = create_app(app_ctx).test_client()
    print(client.get("/ping").get_json())
```

## Building blocks

- `fooddlv.pubsub.LocalPubSub` – an in-memory hub; `subscribe(channel)`
  returns a `Subscription` that can be read with `get(timeout)`, iterated,
  and closed.

  ```python
  from fooddlv.pubsub import LocalPubSub, Message

  with LocalPubSub() as hub:
      subscription = hub.subscribe("OrderCreated")
      hub.publish("OrderCreated", Message(1))
      print(subscription.get(timeout=1).data)
  ```

- `fooddlv.asyncjob.Job` and `fooddlv.asyncjob.Group` – a job runs a
  handler that takes no arguments and fails by raising; a failed job is
  retried after each of its retry durations in turn (1, 5 and 10 seconds
  by default). A group runs its jobs one after another or in parallel and
  raises the last error once every job is done.

  ```python
  from fooddlv.asyncjob import Group, Job

  def work():
      print("working")

  Group(True, Job(work), Job(work, retries=[0.5])).run()
  ```

- `fooddlv.consumers.ConsumerEngine` – runs its consumer jobs as a group
  for every message on the note-created channel; `start()` and `stop()`.
- `fooddlv.errors.AppError` and the `err_*` helpers – errors carrying a
  status code, message, log line and key, serialised with `to_dict()`.
- `fooddlv.models.Paging`, `fooddlv.hashing.Md5Hash`,
  `fooddlv.randx.gen_salt`, `fooddlv.jobqueue.JobQueue` and
  `fooddlv.token_options` (options holding a secret key and a token
  expiry, fifteen minutes by default).

## What it does not do

- There is no login endpoint, and no tokens are issued or checked: the
  token options exist, but nothing generates or verifies a token, and no
  endpoint requires authentication.
- There is no realtime server. `fooddlv.appctx.SocketEngine` only keeps a
  list of sockets per user; nothing opens socket connections.
- `GET /v1/notes/<note-id>` does not return the note; `GetNoteRepo` can
  read one in code.
- The permission check lets every request through.
- Consumers only log the events they receive; they send no notifications
  or e-mails.