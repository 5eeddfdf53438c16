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
"""Host-group assignment for nodes being commissioned.

New nodes join the requested group and learn the identity of one existing
commissioned master through host variables. A worker group cannot be formed
without such a master; a master group may be the first in the cluster.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Mapping, Optional, Protocol

from clusterm.app.domain.errors import TopologyError
from clusterm.app.domain.models import (
    ETCD_MASTER_ADDR_VAR,
    ETCD_MASTER_NAME_VAR,
    HostConfig,
    HostConfigurable,
    HostGroup,
    Node,
)

logger = logging.getLogger(__name__)


class TopologyRegistry(Protocol):
    """Registry queries used to find an existing master."""

    def nodes(self) -> Iterable[Node]:
        """Every node known to the manager."""

    def is_discovered_and_allocated(self, name: str) -> bool:
        """True when node is discovered and its asset is commissioned."""

    def is_master_node(self, name: str) -> bool:
        """True when node belongs to the master group."""


HostFactory = Callable[[Node], HostConfigurable]


def fresh_host_config(node: Node) -> HostConfig:
    base = node.config
    if base is None:
        return HostConfig(tag=node.name, address=node.mgmt_address)
    return base.copy()


@dataclass
class TopologyAssignment:
    """Outcome of host-group assignment."""

    hosts: list[HostConfigurable] = field(default_factory=list)
    master_name: str = ""
    master_addr: str = ""
    master_node: Optional[str] = None


def find_master(registry: TopologyRegistry, exclude: Iterable[str]) -> Node | None:
    """Return the first commissioned master outside exclude, if any."""
    skip = set(exclude)
    for node in registry.nodes():
        if node.name in skip:
            continue
        try:
            allocated = registry.is_discovered_and_allocated(node.name)
        except LookupError as exc:
            logger.debug("a node check failed for %r. Error: %s", node.name, exc)
            continue
        if not allocated:
            continue
        try:
            master = registry.is_master_node(node.name)
        except LookupError as exc:
            logger.debug("a node check failed for %r. Error: %s", node.name, exc)
            continue
        if master:
            return node
    return None


def assign_topology(
    registry: TopologyRegistry,
    targets: Mapping[str, Node],
    host_group: str,
    host_factory: HostFactory = fresh_host_config,
) -> TopologyAssignment:
    """Build host configs for targets joining host_group."""
    master = find_master(registry, exclude=targets.keys())
    assignment = TopologyAssignment()
    if master is not None:
        assignment.master_node = master.name
        assignment.master_addr = master.mgmt_address
        assignment.master_name = master.tag
    elif host_group == HostGroup.WORKER.value:
        raise TopologyError(
            "Cannot commission a worker node without existence of a master node "
            "in the cluster, make sure atleast one master node is commissioned."
        )

    for node in targets.values():
        host = host_factory(node)
        host.set_group(host_group)
        host.set_var(ETCD_MASTER_ADDR_VAR, assignment.master_addr)
        host.set_var(ETCD_MASTER_NAME_VAR, assignment.master_name)
        assignment.hosts.append(host)
    return assignment
