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
"""Runtime settings read from the environment."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional


def _env(environ: Mapping[str, str], name: str, default: str = "") -> str:
    return (environ.get(name, default) or default).strip()


@dataclass(frozen=True)
class Settings:
    """Service configuration."""

    engine_mode: str = "simulated"
    log_level: str = "INFO"
    ansible_playbook_dir: str = "/etc/clusterm/ansible"
    ansible_configure_playbook: str = "site.yml"
    ansible_cleanup_playbook: str = "cleanup.yml"
    ansible_key_file: Optional[str] = None
    ansible_user: Optional[str] = None
    simulated_delay_ms: int = 0
    simulated_fail: str = ""
    global_extra_vars: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        raw_vars = _env(env, "CLUSTERM_GLOBAL_EXTRA_VARS")
        try:
            global_vars = json.loads(raw_vars) if raw_vars else {}
        except ValueError as exc:
            raise ValueError(f"CLUSTERM_GLOBAL_EXTRA_VARS is not valid JSON: {exc}") from exc
        if not isinstance(global_vars, dict):
            raise ValueError("CLUSTERM_GLOBAL_EXTRA_VARS must be a JSON object")

        return cls(
            engine_mode=_env(env, "CLUSTERM_ENGINE_MODE", "simulated").lower(),
            log_level=_env(env, "CLUSTERM_LOG_LEVEL", "INFO").upper(),
            ansible_playbook_dir=_env(
                env, "CLUSTERM_ANSIBLE_PLAYBOOK_DIR", "/etc/clusterm/ansible"
            ),
            ansible_configure_playbook=_env(
                env, "CLUSTERM_ANSIBLE_CONFIGURE_PLAYBOOK", "site.yml"
            ),
            ansible_cleanup_playbook=_env(
                env, "CLUSTERM_ANSIBLE_CLEANUP_PLAYBOOK", "cleanup.yml"
            ),
            ansible_key_file=_env(env, "CLUSTERM_ANSIBLE_KEY_FILE") or None,
            ansible_user=_env(env, "CLUSTERM_ANSIBLE_USER") or None,
            simulated_delay_ms=int(_env(env, "CLUSTERM_SIMULATED_DELAY_MS", "0") or "0"),
            simulated_fail=_env(env, "CLUSTERM_SIMULATED_FAIL").lower(),
            global_extra_vars=global_vars,
        )
