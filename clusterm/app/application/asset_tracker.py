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
"""Atomic and best-effort asset status updates over node sets."""

from __future__ import annotations

import logging
from typing import Iterable, Protocol

from clusterm.app.domain.errors import ClustermError, StatusTransitionError
from clusterm.app.domain.models import AssetEvent, AssetStatus, AssetUpdateOutcome
from clusterm.app.domain.state_machine import AssetStateMachine

logger = logging.getLogger(__name__)


class Inventory(Protocol):
    """Asset persistence contract."""

    def get_asset_status(self, name: str) -> AssetStatus:
        """Return current status or raise LookupError."""

    def set_asset_status(self, name: str, event: AssetEvent) -> AssetStatus:
        """Apply event to one asset and return the new status."""


def _unique(names: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(names))


class AssetStatusTracker:
    """The only writer of asset status for commissioning workflows."""

    def __init__(self, inventory: Inventory, state_machine: AssetStateMachine | None = None):
        self.inventory = inventory
        self.state_machine = state_machine or AssetStateMachine()

    def set_assets_status_atomic(
        self, names: Iterable[str], event: AssetEvent, revert_event: AssetEvent
    ) -> None:
        """Apply event to every asset or to none of them."""
        names = _unique(names)
        expected = self.state_machine.expected_status(event)

        mismatched: list[str] = []
        for name in names:
            try:
                status = self.inventory.get_asset_status(name)
            except LookupError as exc:
                raise StatusTransitionError(str(exc)) from exc
            if status != expected:
                mismatched.append(f"{name}={status.value}")
        if mismatched:
            raise StatusTransitionError(
                f"Cannot {event.value} assets not in {expected.value} state: "
                + ", ".join(mismatched)
            )

        applied: list[str] = []
        for name in names:
            try:
                self.inventory.set_asset_status(name, event)
            except (LookupError, ClustermError) as exc:
                self._revert(applied, revert_event)
                raise StatusTransitionError(
                    f"Failed to {event.value} asset {name}: {exc}"
                ) from exc
            applied.append(name)

    def _revert(self, names: list[str], revert_event: AssetEvent) -> None:
        for name in reversed(names):
            try:
                self.inventory.set_asset_status(name, revert_event)
            except (LookupError, ClustermError) as exc:
                logger.error("failed to revert asset %s: %s", name, exc)

    def set_assets_status_best_effort(
        self, names: Iterable[str], event: AssetEvent
    ) -> list[AssetUpdateOutcome]:
        """Apply event per asset; failures are collected, not raised."""
        outcomes: list[AssetUpdateOutcome] = []
        for name in _unique(names):
            try:
                self.inventory.set_asset_status(name, event)
            except (LookupError, ClustermError) as exc:
                logger.warning("failed to %s asset %s: %s", event.value, name, exc)
                outcomes.append(AssetUpdateOutcome(name=name, ok=False, error=str(exc)))
                continue
            outcomes.append(AssetUpdateOutcome(name=name, ok=True))
        return outcomes

    def provision(self, names: Iterable[str]) -> None:
        self.set_assets_status_atomic(names, AssetEvent.PROVISION, AssetEvent.RELEASE)

    def commission(self, names: Iterable[str]) -> list[AssetUpdateOutcome]:
        return self.set_assets_status_best_effort(names, AssetEvent.COMMISSION)

    def release(self, names: Iterable[str]) -> list[AssetUpdateOutcome]:
        return self.set_assets_status_best_effort(names, AssetEvent.RELEASE)
