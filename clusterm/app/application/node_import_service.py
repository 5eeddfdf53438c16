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
"""CSV node inventory import use-case."""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass, field

from clusterm.app.domain.models import AssetStatus, HostConfig, HostGroup, Node
from clusterm.app.infrastructure.in_memory_inventory import InMemoryInventory
from clusterm.app.infrastructure.in_memory_node_registry import InMemoryNodeRegistry

_TRUE_VALUES = {"1", "true", "yes", "y", "on"}
_FALSE_VALUES = {"0", "false", "no", "n", "off"}


@dataclass
class FailedRow:
    """Failed CSV row details."""

    row_number: int
    row: dict[str, str]
    error: str


@dataclass
class NodeImportResult:
    """Import result details."""

    nodes: list[Node] = field(default_factory=list)
    failed_rows: list[FailedRow] = field(default_factory=list)


class NodeImportService:
    """Loads a static node inventory from CSV."""

    def __init__(self, registry: InMemoryNodeRegistry, inventory: InMemoryInventory):
        self.registry = registry
        self.inventory = inventory

    def import_csv(self, csv_content: str) -> NodeImportResult:
        reader = csv.DictReader(io.StringIO(csv_content))
        failures: list[FailedRow] = []
        nodes: list[Node] = []
        statuses: dict[str, AssetStatus] = {}

        for row_number, row in enumerate(reader, start=2):
            normalized = {
                (key or "").strip(): (
                    (value or "").strip() if isinstance(value, str) else ""
                )
                for key, value in row.items()
            }
            required = ("name", "mgmt_address")
            missing = [name for name in required if not normalized.get(name)]
            if missing:
                failures.append(
                    FailedRow(
                        row_number=row_number,
                        row=normalized,
                        error=f"Missing required fields: {', '.join(missing)}",
                    )
                )
                continue

            name = normalized["name"]
            if name in statuses:
                failures.append(
                    FailedRow(row_number, normalized, f"Duplicate node name: {name}")
                )
                continue

            discovered_raw = normalized.get("discovered", "").lower()
            if discovered_raw and discovered_raw not in _TRUE_VALUES | _FALSE_VALUES:
                failures.append(
                    FailedRow(
                        row_number,
                        normalized,
                        f"Invalid discovered value: {normalized['discovered']}",
                    )
                )
                continue

            status_raw = normalized.get("status") or AssetStatus.UNALLOCATED.value
            try:
                status = AssetStatus(status_raw.lower())
            except ValueError:
                failures.append(
                    FailedRow(row_number, normalized, f"Invalid status: {status_raw}")
                )
                continue

            group = normalized.get("group", "")
            if group and group not in {g.value for g in HostGroup}:
                failures.append(
                    FailedRow(row_number, normalized, f"Invalid host group: {group}")
                )
                continue

            nodes.append(
                Node(
                    name=name,
                    mgmt_address=normalized["mgmt_address"],
                    discovered=discovered_raw not in _FALSE_VALUES,
                    config=HostConfig(
                        tag=normalized.get("tag") or name,
                        address=normalized["mgmt_address"],
                        group=group,
                    ),
                )
            )
            statuses[name] = status

        self.inventory.replace(statuses)
        self.registry.replace(nodes)
        return NodeImportResult(nodes=nodes, failed_rows=failures)
