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
"""Domain models for the commissioning engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Protocol

# Host variables handed to the configuration engine so new nodes can join the
# existing control plane.
ETCD_MASTER_ADDR_VAR = "etcd_master_addr"
ETCD_MASTER_NAME_VAR = "etcd_master_name"


class AssetStatus(str, Enum):
    """Allocation lifecycle of a node's asset record."""

    UNALLOCATED = "unallocated"
    PROVISIONING = "provisioning"
    COMMISSIONED = "commissioned"
    ERRORED = "errored"


class AssetEvent(str, Enum):
    """Events that move an asset between statuses."""

    PROVISION = "provision"
    COMMISSION = "commission"
    RELEASE = "release"


@dataclass(frozen=True)
class AssetTransition:
    """Single asset transition entry."""

    current: AssetStatus
    event: AssetEvent
    next_status: AssetStatus


class HostGroup(str, Enum):
    """Topology role of a node in the cluster."""

    MASTER = "service-master"
    WORKER = "service-worker"


def is_valid_host_group(value: str | None) -> bool:
    """Return True if value names a recognized host group."""
    return value in {group.value for group in HostGroup}


class JobStatus(str, Enum):
    """Lifecycle states for the active job."""

    IDLE = "idle"
    ACTIVE = "active"
    ERRORED = "errored"
    COMPLETED = "completed"


class HostConfigurable(Protocol):
    """Capabilities the topology assignment needs from a host config."""

    def set_group(self, group: str) -> None:
        """Assign the host to a group."""

    def set_var(self, name: str, value: str) -> None:
        """Set one host variable."""

    def get_tag(self) -> str:
        """Return the host's inventory tag."""


@dataclass
class HostConfig:
    """Per-node payload handed to the configuration engine."""

    tag: str
    address: str
    group: str = ""
    vars: dict[str, str] = field(default_factory=dict)

    def set_group(self, group: str) -> None:
        self.group = group

    def set_var(self, name: str, value: str) -> None:
        self.vars[name] = value

    def get_tag(self) -> str:
        return self.tag

    def copy(self) -> "HostConfig":
        """Fresh copy so a commission event never mutates registry state."""
        return HostConfig(
            tag=self.tag, address=self.address, group=self.group, vars=dict(self.vars)
        )


@dataclass
class Node:
    """Cluster node known to the manager."""

    name: str
    mgmt_address: str
    discovered: bool = True
    config: Optional[HostConfig] = None

    @property
    def tag(self) -> str:
        return self.config.get_tag() if self.config else self.name


@dataclass(frozen=True)
class AssetUpdateOutcome:
    """Result of one node's best-effort status update."""

    name: str
    ok: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class JobSnapshot:
    """Read-only view of a job for callers and the API."""

    job_id: str
    description: str
    status: JobStatus
    created_at: str
    completed_at: Optional[str] = None
    error: Optional[str] = None
    logs: list[str] = field(default_factory=list)
