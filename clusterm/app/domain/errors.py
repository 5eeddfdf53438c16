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
"""Error taxonomy for commissioning workflows."""


class ClustermError(Exception):
    """Base class for all commissioning errors."""


class ActiveJobConflictError(ClustermError):
    """Another cluster-mutating job is already active."""

    def __init__(self, description: str):
        super().__init__(
            "there is already an active job, please try in sometime. "
            f"Job: {description}"
        )
        self.description = description


class CommissionValidationError(ClustermError):
    """Request named an invalid host group, an unknown or ineligible node."""


class TopologyError(ClustermError):
    """Requested topology cannot be satisfied by the current cluster."""


class StatusTransitionError(ClustermError):
    """Asset status change is illegal for the node's current status."""


class ConfigurationError(ClustermError):
    """The configuration engine reported a failure."""


class CleanupError(ClustermError):
    """The compensating cleanup run failed. Logged, never surfaced."""


class JobCancelledError(ClustermError):
    """The active job was cancelled while the engine was running."""
