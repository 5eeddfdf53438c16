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
"""Commission workflow: bring discovered nodes into the cluster."""

from __future__ import annotations

import logging
from concurrent.futures import Future
from threading import Event, Lock
from typing import TYPE_CHECKING, Any, Iterable, Optional

from clusterm.app.application.active_job import JobLogs
from clusterm.app.application.configuration import configure_or_cleanup_on_error
from clusterm.app.application.topology import assign_topology
from clusterm.app.application.validation import common_event_validate, parse_extra_vars
from clusterm.app.domain.errors import CommissionValidationError
from clusterm.app.domain.models import (
    AssetUpdateOutcome,
    HostConfig,
    HostConfigurable,
    JobSnapshot,
    JobStatus,
    Node,
    is_valid_host_group,
)
from clusterm.app.domain.state_machine import CommissionPhase, CommissionStateMachine

if TYPE_CHECKING:
    from clusterm.app.application.cluster_manager import ClusterManager

logger = logging.getLogger(__name__)


class CommissionEvent:
    """Request-scoped aggregate driving one commission workflow."""

    def __init__(
        self,
        manager: "ClusterManager",
        node_names: Iterable[str],
        extra_vars: str | dict[str, Any] | None,
        host_group: str,
    ):
        self.manager = manager
        self.node_names = list(dict.fromkeys(node_names))
        self.raw_extra_vars = extra_vars
        self.host_group = host_group
        self.extra_vars: dict[str, Any] = {}
        self.phase = CommissionPhase.CREATED
        self.job: Optional[JobSnapshot] = None
        self.future: Optional[Future[JobStatus]] = None
        self.outcomes: list[AssetUpdateOutcome] = []

        self._phases = CommissionStateMachine()
        self._phase_lock = Lock()
        self._enodes: dict[str, Node] = {}
        self._hosts: list[HostConfigurable] = []

    def __str__(self) -> str:
        return f"commissionEvent: {self.node_names}"

    @property
    def hosts(self) -> list[HostConfigurable]:
        return list(self._hosts)

    def _advance(self, target: CommissionPhase) -> None:
        with self._phase_lock:
            self.phase = self._phases.transition(self.phase, target)

    def process(self) -> JobSnapshot:
        """Accept or reject the request; provisioning continues in background."""
        self.job = self.manager.gate.check_and_set_active_job(
            self.configure_or_cleanup_on_error_runner,
            self._on_complete,
            description=str(self),
        )
        provisioned = False
        try:
            self._advance(CommissionPhase.VALIDATING)
            self.event_validate()

            self._advance(CommissionPhase.PREPARING_INVENTORY)
            self.prepare_inventory()

            self._advance(CommissionPhase.SETTING_PROVISIONING)
            self.manager.tracker.provision(self.node_names)
            provisioned = True

            self._advance(CommissionPhase.RUNNING)
            self.future = self.manager.gate.run_active_job()
        except Exception:
            if provisioned:
                self.outcomes = self.manager.tracker.release(self.node_names)
            self.manager.gate.reset_active_job()
            if self.phase == CommissionPhase.RUNNING:
                self._advance(CommissionPhase.ROLLING_BACK)
            self._advance(CommissionPhase.DONE)
            raise
        return self.job

    def event_validate(self) -> None:
        if not is_valid_host_group(self.host_group):
            raise CommissionValidationError(
                f"invalid or empty host-group specified: {self.host_group!r}"
            )
        request_vars = parse_extra_vars(self.raw_extra_vars)
        self.extra_vars = {**self.manager.global_extra_vars, **request_vars}
        self._enodes = common_event_validate(self.manager.registry, self.node_names)

    def prepare_inventory(self) -> None:
        assignment = assign_topology(self.manager.registry, self._enodes, self.host_group)
        if assignment.master_node:
            logger.info(
                "commissioning %s into %s with master %s (%s)",
                self.node_names,
                self.host_group,
                assignment.master_name,
                assignment.master_addr,
            )
        else:
            logger.info(
                "commissioning %s as first %s", self.node_names, self.host_group
            )
        self._hosts = assignment.hosts

    def configure_or_cleanup_on_error_runner(
        self, cancel_event: Event, job_logs: JobLogs
    ) -> None:
        configure_or_cleanup_on_error(
            self.manager.engine, self._hosts, self.extra_vars, cancel_event, job_logs
        )

    def _on_complete(self, status: JobStatus, error: BaseException | None) -> None:
        if status == JobStatus.ERRORED:
            self._advance(CommissionPhase.ROLLING_BACK)
            logger.error("configuration job failed. Error: %s", error)
            self.outcomes = self.manager.tracker.release(self.node_names)
        else:
            self._advance(CommissionPhase.COMMITTING)
            self.outcomes = self.manager.tracker.commission(self.node_names)
            self._record_host_configs()
        for outcome in self.outcomes:
            if not outcome.ok:
                logger.error(
                    "asset status update failed for %s: %s", outcome.name, outcome.error
                )
        self._advance(CommissionPhase.DONE)

    def _record_host_configs(self) -> None:
        committed = {outcome.name for outcome in self.outcomes if outcome.ok}
        for name, host in zip(self._enodes, self._hosts):
            if name in committed and isinstance(host, HostConfig):
                self.manager.registry.set_host_config(name, host)
