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
"""Unit tests for CSV node import."""

from clusterm.app.application.node_import_service import NodeImportService
from clusterm.app.domain.models import AssetStatus
from clusterm.app.infrastructure.in_memory_inventory import InMemoryInventory
from clusterm.app.infrastructure.in_memory_node_registry import InMemoryNodeRegistry


def build_service() -> NodeImportService:
    inventory = InMemoryInventory()
    return NodeImportService(
        registry=InMemoryNodeRegistry(inventory), inventory=inventory
    )


def test_import_csv_loads_nodes_and_statuses():
    service = build_service()
    csv_content = (
        "name,mgmt_address,tag,discovered,status,group\n"
        "m1,10.0.0.5,master-1,yes,commissioned,service-master\n"
        "n1,10.0.0.11,,,,\n"
        "n2,10.0.0.12,node-2,false,unallocated,\n"
    )

    result = service.import_csv(csv_content)

    assert [node.name for node in result.nodes] == ["m1", "n1", "n2"]
    assert result.failed_rows == []
    assert service.inventory.list() == {
        "m1": AssetStatus.COMMISSIONED,
        "n1": AssetStatus.UNALLOCATED,
        "n2": AssetStatus.UNALLOCATED,
    }
    m1 = service.registry.find_node("m1")
    assert m1.tag == "master-1"
    assert service.registry.is_master_node("m1") is True
    assert service.registry.is_discovered_and_allocated("m1") is True
    assert service.registry.find_node("n1").tag == "n1"
    assert service.registry.find_node("n2").discovered is False


def test_import_csv_reports_failed_rows():
    service = build_service()
    csv_content = (
        "name,mgmt_address,discovered,status,group\n"
        "n1,,yes,,\n"
        "n2,10.0.0.12,maybe,,\n"
        "n3,10.0.0.13,,retired,\n"
        "n4,10.0.0.14,,,service-storage\n"
        "n5,10.0.0.15,,,\n"
        "n5,10.0.0.16,,,\n"
    )

    result = service.import_csv(csv_content)

    assert [node.name for node in result.nodes] == ["n5"]
    errors = {row.row_number: row.error for row in result.failed_rows}
    assert errors == {
        2: "Missing required fields: mgmt_address",
        3: "Invalid discovered value: maybe",
        4: "Invalid status: retired",
        5: "Invalid host group: service-storage",
        7: "Duplicate node name: n5",
    }
    assert service.registry.list_names() == ["n5"]
