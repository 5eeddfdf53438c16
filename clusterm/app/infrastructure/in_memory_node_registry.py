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
"""Thread-safe in-memory node registry."""

from __future__ import annotations

from threading import Lock

from clusterm.app.application.asset_tracker import Inventory
from clusterm.app.domain.models import AssetStatus, HostConfig, HostGroup, Node


class InMemoryNodeRegistry:
    """Nodes known to the manager, in insertion order."""

    def __init__(self, inventory: Inventory) -> None:
        self._lock = Lock()
        self._nodes: dict[str, Node] = {}
        self.inventory = inventory

    def add(self, node: Node) -> None:
        with self._lock:
            self._nodes[node.name] = node

    def replace(self, nodes: list[Node]) -> None:
        with self._lock:
            self._nodes = {node.name: node for node in nodes}

    def nodes(self) -> list[Node]:
        with self._lock:
            return list(self._nodes.values())

    def list_names(self) -> list[str]:
        with self._lock:
            return list(self._nodes)

    def find_node(self, name: str) -> Node:
        with self._lock:
            node = self._nodes.get(name)
        if node is None:
            raise LookupError(f"Node not found: {name}")
        return node

    def is_discovered_and_allocated(self, name: str) -> bool:
        node = self.find_node(name)
        status = self.inventory.get_asset_status(name)
        return node.discovered and status == AssetStatus.COMMISSIONED

    def is_master_node(self, name: str) -> bool:
        node = self.find_node(name)
        if node.config is None:
            raise LookupError(f"Node config not found: {name}")
        return node.config.group == HostGroup.MASTER.value

    def set_host_config(self, name: str, config: HostConfig) -> None:
        """Persist the config a node was commissioned with."""
        with self._lock:
            node = self._nodes.get(name)
            if node is None:
                raise LookupError(f"Node not found: {name}")
            node.config = config
