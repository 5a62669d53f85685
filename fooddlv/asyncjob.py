"""Jobs with retry schedules, and groups that run them serially or in parallel."""

from __future__ import annotations

import enum
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import timedelta
from typing import Callable, Iterable, Optional, Union

Duration = Union[float, int, timedelta]

DEFAULT_MAX_TIMEOUT = 10.0
DEFAULT_MAX_RETRY_COUNT = 3
DEFAULT_RETRY_TIMES: tuple[float, ...] = (1.0, 5.0, 10.0)


class JobState(enum.Enum):
    INIT = 0
    RUNNING = 1
    FAILED = 2
    TIMEOUT = 3
    COMPLETED = 4
    RETRY_FAILED = 5

    def __str__(self) -> str:
        return _STATE_NAMES[self]


_STATE_NAMES = {
    JobState.INIT: "Init",
    JobState.RUNNING: "Running",
    JobState.FAILED: "Failed",
    JobState.TIMEOUT: "Timeout",
    JobState.COMPLETED: "Completed",
    JobState.RETRY_FAILED: "RetryFailed",
}


def _seconds(value: Duration) -> float:
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


class Job:
    """A unit of work that may be retried after a failure.

    The handler takes no arguments and signals failure by raising.
    Each retry waits for the next duration of the retry schedule first.
    """

    def __init__(
        self,
        handler: Callable[[], object],
        *,
        retries: Optional[Iterable[Duration]] = None,
        max_timeout: Duration = DEFAULT_MAX_TIMEOUT,
        sleep: Callable[[float], object] = time.sleep,
    ) -> None:
        self._handler = handler
        self.max_timeout = _seconds(max_timeout)
        self._retries: list[float] = list(DEFAULT_RETRY_TIMES)
        self._state = JobState.INIT
        self._retry_index = -1
        self._sleep = sleep
        if retries is not None:
            self.set_retry_durations(retries)

    @property
    def state(self) -> JobState:
        return self._state

    @property
    def retry_index(self) -> int:
        return self._retry_index

    @property
    def retry_durations(self) -> list[float]:
        return list(self._retries)

    @property
    def retries_left(self) -> int:
        return len(self._retries) - 1 - self._retry_index

    def execute(self) -> None:
        """Run the handler once, re-raising its error."""
        self._state = JobState.RUNNING
        try:
            self._handler()
        except Exception:
            self._state = JobState.FAILED
            raise
        self._state = JobState.COMPLETED

    def retry(self) -> None:
        """Wait for the next retry delay, then run the handler again."""
        if self.retries_left <= 0:
            raise RuntimeError("no retries left")
        self._retry_index += 1
        self._sleep(self._retries[self._retry_index])
        try:
            self.execute()
        except Exception:
            if self._retry_index == len(self._retries) - 1:
                self._state = JobState.RETRY_FAILED
            raise

    def set_retry_durations(self, durations: Iterable[Duration]) -> None:
        """Replace the retry schedule; an empty schedule is ignored."""
        values = [_seconds(d) for d in durations]
        if values:
            self._retries = values


class Group:
    """Runs its jobs, retrying each until it succeeds or its retries run out."""

    def __init__(self, is_parallel: bool, *jobs: Job) -> None:
        self.is_parallel = is_parallel
        self.jobs = list(jobs)

    def run(self) -> None:
        """Run every job; raise the last error reported, if any."""
        if not self.jobs:
            return
        errors: list[Optional[BaseException]] = []
        if self.is_parallel:
            with ThreadPoolExecutor(max_workers=len(self.jobs)) as pool:
                futures = [pool.submit(self._run_job, job) for job in self.jobs]
                errors = [future.exception() for future in as_completed(futures)]
        else:
            for job in self.jobs:
                try:
                    self._run_job(job)
                except Exception as exc:
                    errors.append(exc)
        failures = [error for error in errors if error is not None]
        if failures:
            raise failures[-1]

    @staticmethod
    def _run_job(job: Job) -> None:
        try:
            job.execute()
        except Exception as first_error:
            while job.state is not JobState.RETRY_FAILED and job.retries_left > 0:
                try:
                    job.retry()
                except Exception:
                    continue
                return
            raise first_error