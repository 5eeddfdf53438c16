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
"""Request validation shared by cluster-mutating events."""

from __future__ import annotations

import json
from typing import Any, Iterable, Protocol

from clusterm.app.domain.errors import CommissionValidationError
from clusterm.app.domain.models import Node


class NodeLookup(Protocol):
    """Registry surface needed for validation."""

    def find_node(self, name: str) -> Node:
        """Return node or raise LookupError."""


def common_event_validate(
    registry: NodeLookup, node_names: Iterable[str]
) -> dict[str, Node]:
    """Resolve node names to nodes eligible for a mutating event."""
    names = list(dict.fromkeys(node_names))
    if not names:
        raise CommissionValidationError("atleast one node name must be specified")

    enodes: dict[str, Node] = {}
    for name in names:
        if not name:
            raise CommissionValidationError("node name must not be empty")
        try:
            node = registry.find_node(name)
        except LookupError as exc:
            raise CommissionValidationError(str(exc)) from exc
        if node.config is None:
            raise CommissionValidationError(f"node's configuration doesn't exist: {name}")
        if not node.discovered:
            raise CommissionValidationError(f"node is not in discovered state: {name}")
        enodes[name] = node
    return enodes


def parse_extra_vars(raw: str | dict[str, Any] | None) -> dict[str, Any]:
    """Accept extra vars as a JSON object string or a mapping."""
    if raw is None or raw == "":
        return {}
    if isinstance(raw, dict):
        return dict(raw)
    try:
        parsed = json.loads(raw)
    except ValueError as exc:
        raise CommissionValidationError(f"extra vars are not valid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise CommissionValidationError("extra vars must be a JSON object")
    return parsed
