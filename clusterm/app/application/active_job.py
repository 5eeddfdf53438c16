# Copyright 2026 icecake0141
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# This file was created or modified with the assistance of an AI (Large Language Model).
# Review required for correctness, security, and licensing.
"""Exclusive gate over the single cluster-mutating job.

Only one job may be active at a time. A caller acquires the gate with
``check_and_set_active_job``, performs its synchronous setup, and then either
launches the job with ``run_active_job`` or gives the gate back with
``reset_active_job``. When the background run finishes, the job's completion
callback is invoked exactly once and the gate frees itself.

Synchronous mutations that have no background run, such as replacing the
node inventory, hold the gate with ``hold`` for their whole duration.
"""

from __future__ import annotations

import contextlib
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Event, Lock
from typing import Callable, Iterator, Optional
from uuid import uuid4

from clusterm.app.domain.errors import ActiveJobConflictError
from clusterm.app.domain.models import JobSnapshot, JobStatus

logger = logging.getLogger(__name__)

MAX_JOB_LOG_LINES = 5000


def utc_now() -> str:
    """UTC timestamp in ISO format."""
    return datetime.now(timezone.utc).isoformat()


class JobLogs:
    """Thread-safe line buffer written by the running job."""

    def __init__(self, max_lines: int = MAX_JOB_LOG_LINES) -> None:
        self._lock = Lock()
        self._lines: list[str] = []
        self._max_lines = max_lines
        self.trimmed = False

    def write(self, line: str) -> None:
        with self._lock:
            self._lines.append(line.rstrip("\n"))
            if len(self._lines) > self._max_lines:
                del self._lines[: len(self._lines) - self._max_lines]
                self.trimmed = True

    def lines(self) -> list[str]:
        with self._lock:
            return list(self._lines)

    def __len__(self) -> int:
        with self._lock:
            return len(self._lines)


JobRunner = Callable[[Event, JobLogs], None]
DoneCallback = Callable[[JobStatus, Optional[BaseException]], None]


@dataclass
class Job:
    """The one active mutating operation."""

    job_id: str
    description: str
    runner: JobRunner
    done_cb: DoneCallback
    created_at: str
    status: JobStatus = JobStatus.ACTIVE
    error: Optional[BaseException] = None
    completed_at: Optional[str] = None
    started: bool = False
    cancel_event: Event = field(default_factory=Event)
    logs: JobLogs = field(default_factory=JobLogs)

    def snapshot(self) -> JobSnapshot:
        return JobSnapshot(
            job_id=self.job_id,
            description=self.description,
            status=self.status,
            created_at=self.created_at,
            completed_at=self.completed_at,
            error=str(self.error) if self.error is not None else None,
            logs=self.logs.lines(),
        )


def _hold_runner(cancel_event: Event, job_logs: JobLogs) -> None:
    raise RuntimeError("a held job has no background run")


def _hold_done(status: JobStatus, error: BaseException | None) -> None:
    del status, error


class ActiveJobGate:
    """Serializes all cluster-mutating jobs."""

    def __init__(
        self,
        clock: Callable[[], str] = utc_now,
        id_factory: Callable[[], str] = lambda: str(uuid4()),
        executor: ThreadPoolExecutor | None = None,
    ) -> None:
        self._lock = Lock()
        self._clock = clock
        self._id_factory = id_factory
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="active-job"
        )
        self._active: Job | None = None
        self._last: Job | None = None

    def check_and_set_active_job(
        self, runner: JobRunner, on_complete: DoneCallback, description: str = ""
    ) -> JobSnapshot:
        """Record a new active job or raise ActiveJobConflictError."""
        with self._lock:
            if self._active is not None:
                raise ActiveJobConflictError(self._active.description)
            job = Job(
                job_id=self._id_factory(),
                description=description,
                runner=runner,
                done_cb=on_complete,
                created_at=self._clock(),
            )
            self._active = job
        logger.info("active job set: %s (%s)", job.job_id, description)
        return job.snapshot()

    def run_active_job(self) -> Future[JobStatus]:
        """Launch the active job in the background."""
        with self._lock:
            job = self._active
            if job is None:
                raise LookupError("No active job to run")
            if job.started:
                raise ValueError(f"Active job already started: {job.job_id}")
            job.started = True
        return self._executor.submit(self._run, job)

    def _run(self, job: Job) -> JobStatus:
        error: BaseException | None = None
        try:
            job.runner(job.cancel_event, job.logs)
        except Exception as exc:
            error = exc
        status = JobStatus.ERRORED if error is not None else JobStatus.COMPLETED

        with self._lock:
            job.status = status
            job.error = error
            job.completed_at = self._clock()
        logger.info("job %s finished with status %s", job.job_id, status.value)

        try:
            job.done_cb(status, error)
        except Exception:
            logger.exception("completion callback failed for job %s", job.job_id)

        with self._lock:
            if self._active is job:
                self._active = None
            self._last = job
        return status

    @contextlib.contextmanager
    def hold(self, description: str) -> Iterator[JobSnapshot]:
        """Keep the gate for a synchronous mutation; raises on conflict."""
        job = self.check_and_set_active_job(_hold_runner, _hold_done, description)
        try:
            yield job
        finally:
            self.reset_active_job()

    def reset_active_job(self) -> None:
        """Drop the active job. Safe to call when none is active."""
        with self._lock:
            job = self._active
            self._active = None
        if job is not None:
            logger.info("active job reset: %s", job.job_id)

    def cancel_active_job(self) -> bool:
        """Signal the running job to stop. Returns False if nothing is active."""
        with self._lock:
            job = self._active
        if job is None:
            return False
        job.cancel_event.set()
        logger.info("cancel requested for job %s", job.job_id)
        return True

    def active_job(self) -> JobSnapshot | None:
        with self._lock:
            return self._active.snapshot() if self._active else None

    def last_job(self) -> JobSnapshot | None:
        with self._lock:
            return self._last.snapshot() if self._last else None

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
