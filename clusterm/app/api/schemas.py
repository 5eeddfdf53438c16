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
"""API schemas for the commissioning service."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field


class CommissionRequest(BaseModel):
    """Payload to commission one or more nodes."""

    nodes: List[str] = Field(min_length=1)
    extra_vars: Optional[Union[str, Dict[str, Any]]] = None
    host_group: str = ""


class JobResponse(BaseModel):
    """Job response payload."""

    job_id: str
    description: str
    status: str
    created_at: str
    completed_at: Optional[str] = None
    error: Optional[str] = None
    logs: List[str] = Field(default_factory=list)


class ActiveJobResponse(BaseModel):
    """Active job response."""

    active: bool
    job: Optional[JobResponse] = None


class NodeResponse(BaseModel):
    """Node with its asset status and host config."""

    name: str
    mgmt_address: str
    tag: str
    discovered: bool
    status: Optional[str] = None
    group: str = ""
    vars: Dict[str, str] = Field(default_factory=dict)


class FailedRowResponse(BaseModel):
    """Failed CSV row details."""

    row_number: int
    row: Dict[str, str]
    error: str


class NodeImportResponse(BaseModel):
    """Import response payload."""

    nodes: List[NodeResponse]
    failed_rows: List[FailedRowResponse]
