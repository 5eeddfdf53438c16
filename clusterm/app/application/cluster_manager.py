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
"""Application layer use-cases for cluster membership."""

from __future__ import annotations

from typing import Any, Iterable, Optional

from clusterm.app.application.active_job import ActiveJobGate
from clusterm.app.application.asset_tracker import AssetStatusTracker, Inventory
from clusterm.app.application.commission_event import CommissionEvent
from clusterm.app.application.configuration import ConfigurationEngine
from clusterm.app.domain.models import JobSnapshot
from clusterm.app.infrastructure.in_memory_node_registry import InMemoryNodeRegistry


class ClusterManager:
    """Owns the shared cluster state and the active job gate."""

    def __init__(
        self,
        registry: InMemoryNodeRegistry,
        inventory: Inventory,
        engine: ConfigurationEngine,
        gate: ActiveJobGate | None = None,
        global_extra_vars: Optional[dict[str, Any]] = None,
    ):
        self.registry = registry
        self.inventory = inventory
        self.engine = engine
        self.gate = gate or ActiveJobGate()
        self.tracker = AssetStatusTracker(inventory)
        self.global_extra_vars = dict(global_extra_vars or {})

    def new_commission_event(
        self,
        node_names: Iterable[str],
        extra_vars: str | dict[str, Any] | None = None,
        host_group: str = "",
    ) -> CommissionEvent:
        """Build a commission event; callers run it with process()."""
        return CommissionEvent(self, node_names, extra_vars, host_group)

    def active_job(self) -> JobSnapshot | None:
        return self.gate.active_job()

    def last_job(self) -> JobSnapshot | None:
        return self.gate.last_job()

    def cancel_active_job(self) -> bool:
        return self.gate.cancel_active_job()
