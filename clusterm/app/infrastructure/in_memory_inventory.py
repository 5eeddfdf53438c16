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
"""In-memory asset inventory."""

from __future__ import annotations

from threading import Lock

from clusterm.app.domain.models import AssetEvent, AssetStatus
from clusterm.app.domain.state_machine import AssetStateMachine


class InMemoryInventory:
    """Thread-safe asset status store keyed by node name."""

    def __init__(self, state_machine: AssetStateMachine | None = None) -> None:
        self._lock = Lock()
        self._assets: dict[str, AssetStatus] = {}
        self.state_machine = state_machine or AssetStateMachine()

    def add_asset(
        self, name: str, status: AssetStatus = AssetStatus.UNALLOCATED
    ) -> None:
        with self._lock:
            self._assets[name] = status

    def replace(self, assets: dict[str, AssetStatus]) -> None:
        with self._lock:
            self._assets = dict(assets)

    def get_asset_status(self, name: str) -> AssetStatus:
        with self._lock:
            if name not in self._assets:
                raise LookupError(f"Asset not found: {name}")
            return self._assets[name]

    def set_asset_status(self, name: str, event: AssetEvent) -> AssetStatus:
        with self._lock:
            if name not in self._assets:
                raise LookupError(f"Asset not found: {name}")
            transition = self.state_machine.transition(self._assets[name], event)
            self._assets[name] = transition.next_status
            return transition.next_status

    def list(self) -> dict[str, AssetStatus]:
        with self._lock:
            return dict(self._assets)
