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
"""Simulation engine for API-level scaffolding."""

from __future__ import annotations

from concurrent.futures import Future
from threading import Event, Thread
from typing import Any, Sequence

from clusterm.app.application.configuration import (
    ConfigurationEngine,
    EngineRun,
    OutputStream,
)
from clusterm.app.domain.errors import ConfigurationError, JobCancelledError
from clusterm.app.domain.models import HostConfigurable


class SimulatedConfigurationEngine(ConfigurationEngine):
    """Prints one line per host and succeeds unless told to fail."""

    def __init__(self, delay_ms: int = 0, fail: str = ""):
        self.delay_ms = delay_ms
        self.fail = fail
        self.calls: list[tuple[str, list[str]]] = []

    def configure(
        self, hosts: Sequence[HostConfigurable], extra_vars: dict[str, Any]
    ) -> EngineRun:
        return self._start("configure", hosts, extra_vars)

    def cleanup(
        self, hosts: Sequence[HostConfigurable], extra_vars: dict[str, Any]
    ) -> EngineRun:
        return self._start("cleanup", hosts, extra_vars)

    def _should_fail(self, stage: str) -> bool:
        return self.fail in {stage, "both"}

    def _start(
        self, stage: str, hosts: Sequence[HostConfigurable], extra_vars: dict[str, Any]
    ) -> EngineRun:
        tags = [host.get_tag() for host in hosts]
        self.calls.append((stage, tags))
        output = OutputStream()
        done: Future[None] = Future()
        cancelled = Event()

        def run() -> None:
            try:
                for tag in tags:
                    if cancelled.wait(self.delay_ms / 1000.0):
                        done.set_exception(JobCancelledError(f"{stage} cancelled"))
                        return
                    output.write(
                        f"simulated {stage} on {tag}: {len(extra_vars)} extra vars"
                    )
                if self._should_fail(stage):
                    done.set_exception(ConfigurationError(f"simulated {stage} failure"))
                    return
                done.set_result(None)
            finally:
                output.close()

        Thread(target=run, daemon=True).start()
        return EngineRun(output=output, cancel=cancelled.set, done=done)
