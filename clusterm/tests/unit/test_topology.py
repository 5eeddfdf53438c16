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
"""Unit tests for host-group assignment."""

import pytest

from clusterm.app.application.topology import assign_topology, find_master
from clusterm.app.domain.errors import TopologyError
from clusterm.app.domain.models import (
    ETCD_MASTER_ADDR_VAR,
    ETCD_MASTER_NAME_VAR,
    AssetStatus,
    HostConfig,
    HostGroup,
    Node,
)
from clusterm.app.infrastructure.in_memory_inventory import InMemoryInventory
from clusterm.app.infrastructure.in_memory_node_registry import InMemoryNodeRegistry

MASTER = HostGroup.MASTER.value
WORKER = HostGroup.WORKER.value


def build_registry() -> InMemoryNodeRegistry:
    return InMemoryNodeRegistry(InMemoryInventory())


def add_node(
    registry: InMemoryNodeRegistry,
    name: str,
    address: str,
    group: str = "",
    status: AssetStatus | None = AssetStatus.UNALLOCATED,
    tag: str | None = None,
    discovered: bool = True,
) -> Node:
    node = Node(
        name=name,
        mgmt_address=address,
        discovered=discovered,
        config=HostConfig(tag=tag or name, address=address, group=group),
    )
    registry.add(node)
    if status is not None:
        registry.inventory.add_asset(name, status)
    return node


def targets(registry: InMemoryNodeRegistry, *names: str) -> dict[str, Node]:
    return {name: registry.find_node(name) for name in names}


def test_workers_get_existing_master_identity():
    registry = build_registry()
    add_node(registry, "m1", "10.0.0.5", MASTER, AssetStatus.COMMISSIONED, "master-1")
    add_node(registry, "n1", "10.0.0.11")
    add_node(registry, "n2", "10.0.0.12")

    assignment = assign_topology(registry, targets(registry, "n1", "n2"), WORKER)

    assert assignment.master_node == "m1"
    assert [h.get_tag() for h in assignment.hosts] == ["n1", "n2"]
    for host in assignment.hosts:
        assert host.group == WORKER
        assert host.vars[ETCD_MASTER_ADDR_VAR] == "10.0.0.5"
        assert host.vars[ETCD_MASTER_NAME_VAR] == "master-1"


def test_worker_without_master_is_rejected():
    registry = build_registry()
    add_node(registry, "n1", "10.0.0.11")

    with pytest.raises(TopologyError, match="without existence of a master"):
        assign_topology(registry, targets(registry, "n1"), WORKER)


def test_first_master_proceeds_with_empty_master_vars():
    registry = build_registry()
    add_node(registry, "n1", "10.0.0.11")

    assignment = assign_topology(registry, targets(registry, "n1"), MASTER)

    assert assignment.master_node is None
    host = assignment.hosts[0]
    assert host.group == MASTER
    assert host.vars == {ETCD_MASTER_ADDR_VAR: "", ETCD_MASTER_NAME_VAR: ""}


@pytest.mark.parametrize(
    ("group", "status", "discovered"),
    [
        (MASTER, AssetStatus.PROVISIONING, True),
        (MASTER, AssetStatus.UNALLOCATED, True),
        (MASTER, AssetStatus.COMMISSIONED, False),
        (WORKER, AssetStatus.COMMISSIONED, True),
    ],
)
def test_ineligible_nodes_are_not_masters(group, status, discovered):
    registry = build_registry()
    add_node(registry, "x1", "10.0.0.9", group, status, discovered=discovered)
    add_node(registry, "n1", "10.0.0.11")

    assert find_master(registry, exclude=["n1"]) is None


def test_nodes_in_event_are_skipped():
    registry = build_registry()
    add_node(registry, "m1", "10.0.0.5", MASTER, AssetStatus.COMMISSIONED)

    assert find_master(registry, exclude=["m1"]) is None


def test_lookup_failures_are_not_matches():
    registry = build_registry()
    add_node(registry, "orphan", "10.0.0.4", MASTER, status=None)
    registry.add(Node(name="bare", mgmt_address="10.0.0.3", config=None))
    registry.inventory.add_asset("bare", AssetStatus.COMMISSIONED)
    add_node(registry, "m2", "10.0.0.6", MASTER, AssetStatus.COMMISSIONED, "master-2")
    add_node(registry, "n1", "10.0.0.11")

    assignment = assign_topology(registry, targets(registry, "n1"), WORKER)

    assert assignment.master_node == "m2"
    assert assignment.master_name == "master-2"


def test_assignment_does_not_touch_registry_configs():
    registry = build_registry()
    add_node(registry, "m1", "10.0.0.5", MASTER, AssetStatus.COMMISSIONED)
    node = add_node(registry, "n1", "10.0.0.11")

    assign_topology(registry, targets(registry, "n1"), WORKER)

    assert node.config is not None
    assert node.config.group == ""
    assert node.config.vars == {}


def test_custom_host_factory_only_needs_capabilities():
    class RecordingHost:
        def __init__(self, tag):
            self.tag = tag
            self.calls = []

        def set_group(self, group):
            self.calls.append(("group", group))

        def set_var(self, name, value):
            self.calls.append((name, value))

        def get_tag(self):
            return self.tag

    registry = build_registry()
    add_node(registry, "m1", "10.0.0.5", MASTER, AssetStatus.COMMISSIONED, "master-1")
    add_node(registry, "n1", "10.0.0.11")

    assignment = assign_topology(
        registry,
        targets(registry, "n1"),
        WORKER,
        host_factory=lambda node: RecordingHost(node.name),
    )

    assert assignment.hosts[0].calls == [
        ("group", WORKER),
        (ETCD_MASTER_ADDR_VAR, "10.0.0.5"),
        (ETCD_MASTER_NAME_VAR, "master-1"),
    ]
