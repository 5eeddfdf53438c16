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
"""Configuration engine contract and the configure-or-cleanup protocol."""

from __future__ import annotations

import logging
from concurrent.futures import Future, wait
from dataclasses import dataclass
from queue import Queue
from threading import Event, Thread
from typing import Any, Callable, Iterable, Iterator, Protocol, Sequence

from clusterm.app.application.active_job import JobLogs
from clusterm.app.domain.errors import (
    CleanupError,
    ClustermError,
    ConfigurationError,
    JobCancelledError,
)
from clusterm.app.domain.models import HostConfigurable

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 0.2
CANCEL_GRACE_SECONDS = 30.0
OUTPUT_DRAIN_SECONDS = 5.0

_CLOSED = object()


class OutputStream:
    """Line stream written by an engine and read by the job."""

    def __init__(self) -> None:
        self._queue: Queue[object] = Queue()

    def write(self, line: str) -> None:
        self._queue.put(line)

    def close(self) -> None:
        self._queue.put(_CLOSED)

    def __iter__(self) -> Iterator[str]:
        while True:
            item = self._queue.get()
            if item is _CLOSED:
                return
            yield str(item)


@dataclass
class EngineRun:
    """Handle to one engine invocation.

    ``done`` resolves to None on success and carries the failure as its
    exception otherwise.
    """

    output: Iterable[str]
    cancel: Callable[[], None]
    done: Future[None]


class ConfigurationEngine(Protocol):
    """External automation that applies provisioning steps to hosts."""

    def configure(
        self, hosts: Sequence[HostConfigurable], extra_vars: dict[str, Any]
    ) -> EngineRun:
        """Start configuring hosts."""

    def cleanup(
        self, hosts: Sequence[HostConfigurable], extra_vars: dict[str, Any]
    ) -> EngineRun:
        """Start returning hosts to a clean state."""


def _pump_output(output: Iterable[str], job_logs: JobLogs) -> None:
    try:
        for line in output:
            job_logs.write(line)
    except Exception as exc:
        logger.warning("engine output stream failed: %s", exc)


def _as_job_error(exc: BaseException) -> ClustermError:
    if isinstance(exc, ClustermError):
        return exc
    return ConfigurationError(str(exc) or exc.__class__.__name__)


def stream_output_and_wait(
    run: EngineRun,
    cancel_event: Event,
    job_logs: JobLogs,
    poll_interval: float = POLL_INTERVAL_SECONDS,
) -> ClustermError | None:
    """Copy engine output into job logs until the run ends or is cancelled."""
    pump = Thread(target=_pump_output, args=(run.output, job_logs), daemon=True)
    pump.start()

    error: ClustermError | None = None
    while True:
        if cancel_event.is_set():
            run.cancel()
            wait([run.done], timeout=CANCEL_GRACE_SECONDS)
            error = JobCancelledError("job was cancelled")
            break
        done, _ = wait([run.done], timeout=poll_interval)
        if not done:
            continue
        if run.done.cancelled():
            error = JobCancelledError("engine run was cancelled")
        else:
            exc = run.done.exception()
            if exc is not None:
                error = _as_job_error(exc)
        break

    pump.join(timeout=OUTPUT_DRAIN_SECONDS)
    return error


def _start(start: Callable[[], EngineRun], stage: str) -> EngineRun | ClustermError:
    try:
        return start()
    except Exception as exc:
        logger.error("failed to start %s: %s", stage, exc)
        return _as_job_error(exc)


def configure_or_cleanup_on_error(
    engine: ConfigurationEngine,
    hosts: Sequence[HostConfigurable],
    extra_vars: dict[str, Any],
    cancel_event: Event,
    job_logs: JobLogs,
) -> None:
    """Configure hosts; on failure run cleanup and raise the original error."""
    run = _start(lambda: engine.configure(hosts, extra_vars), "configuration")
    if isinstance(run, ClustermError):
        cfg_err: ClustermError | None = run
    else:
        cfg_err = stream_output_and_wait(run, cancel_event, job_logs)
    if cfg_err is None:
        return

    logger.error("configuration failed, starting cleanup. Error: %s", cfg_err)
    job_logs.write(f"configuration failed: {cfg_err}")

    cleanup = _start(lambda: engine.cleanup(hosts, extra_vars), "cleanup")
    if isinstance(cleanup, ClustermError):
        cleanup_err: ClustermError | None = cleanup
    else:
        cleanup_err = stream_output_and_wait(cleanup, cancel_event, job_logs)
    if cleanup_err is not None:
        failure = CleanupError(str(cleanup_err))
        logger.error("cleanup failed. Error: %s", failure)
        job_logs.write(f"cleanup failed: {failure}")

    raise cfg_err
