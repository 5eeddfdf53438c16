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
"""Finite state machines for asset status and commission phases."""

from enum import Enum

from .errors import StatusTransitionError
from .models import AssetEvent, AssetStatus, AssetTransition


class AssetStateMachine:
    """Validates and executes asset status transitions."""

    _transitions = {
        (AssetStatus.UNALLOCATED, AssetEvent.PROVISION): AssetStatus.PROVISIONING,
        (AssetStatus.PROVISIONING, AssetEvent.COMMISSION): AssetStatus.COMMISSIONED,
        (AssetStatus.PROVISIONING, AssetEvent.RELEASE): AssetStatus.UNALLOCATED,
    }

    def can_transition(self, status: AssetStatus, event: AssetEvent) -> bool:
        """Return True if transition is valid for the current status."""
        return (status, event) in self._transitions

    def expected_status(self, event: AssetEvent) -> AssetStatus:
        """Return the only status from which event may be applied."""
        for (status, candidate), _ in self._transitions.items():
            if candidate == event:
                return status
        raise ValueError(f"Unknown asset event: {event}")

    def transition(self, status: AssetStatus, event: AssetEvent) -> AssetTransition:
        """Apply a transition or raise StatusTransitionError."""
        key = (status, event)
        if key not in self._transitions:
            raise StatusTransitionError(
                f"Invalid asset transition: status={status.value}, event={event.value}"
            )
        return AssetTransition(
            current=status, event=event, next_status=self._transitions[key]
        )


class CommissionPhase(str, Enum):
    """Progress of a single commission event."""

    CREATED = "created"
    VALIDATING = "validating"
    PREPARING_INVENTORY = "preparing_inventory"
    SETTING_PROVISIONING = "setting_provisioning"
    RUNNING = "running"
    COMMITTING = "committing"
    ROLLING_BACK = "rolling_back"
    DONE = "done"


class CommissionStateMachine:
    """Allowed phase changes of a commission event."""

    _next = {
        CommissionPhase.CREATED: {CommissionPhase.VALIDATING, CommissionPhase.DONE},
        CommissionPhase.VALIDATING: {
            CommissionPhase.PREPARING_INVENTORY,
            CommissionPhase.DONE,
        },
        CommissionPhase.PREPARING_INVENTORY: {
            CommissionPhase.SETTING_PROVISIONING,
            CommissionPhase.DONE,
        },
        CommissionPhase.SETTING_PROVISIONING: {
            CommissionPhase.RUNNING,
            CommissionPhase.DONE,
        },
        CommissionPhase.RUNNING: {
            CommissionPhase.COMMITTING,
            CommissionPhase.ROLLING_BACK,
        },
        CommissionPhase.COMMITTING: {CommissionPhase.DONE},
        CommissionPhase.ROLLING_BACK: {CommissionPhase.DONE},
        CommissionPhase.DONE: set(),
    }

    def can_transition(self, current: CommissionPhase, target: CommissionPhase) -> bool:
        return target in self._next[current]

    def transition(
        self, current: CommissionPhase, target: CommissionPhase
    ) -> CommissionPhase:
        if not self.can_transition(current, target):
            raise ValueError(
                f"Invalid phase change: {current.value} -> {target.value}"
            )
        return target
