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
"""Ansible-based configuration engine."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from concurrent.futures import Future
from threading import Event, Thread
from typing import Any, Optional, Sequence

import ansible_runner

from clusterm.app.application.configuration import (
    ConfigurationEngine,
    EngineRun,
    OutputStream,
)
from clusterm.app.domain.errors import ConfigurationError, JobCancelledError
from clusterm.app.domain.models import HostConfig, HostConfigurable

logger = logging.getLogger(__name__)


def build_inventory(hosts: Sequence[HostConfigurable]) -> dict[str, Any]:
    """Ansible inventory with one child group per host group."""
    children: dict[str, dict[str, Any]] = {}
    for host in hosts:
        if not isinstance(host, HostConfig):
            raise ConfigurationError(f"unsupported host config for {host.get_tag()}")
        group = children.setdefault(host.group or "ungrouped", {"hosts": {}})
        group["hosts"][host.tag] = {"ansible_host": host.address, **host.vars}
    return {"all": {"children": children}}


class AnsibleConfigurationEngine(ConfigurationEngine):
    """Runs configure and cleanup playbooks through ansible-runner."""

    def __init__(
        self,
        playbook_dir: str,
        configure_playbook: str = "site.yml",
        cleanup_playbook: str = "cleanup.yml",
        key_file: Optional[str] = None,
        user: Optional[str] = None,
    ):
        self.playbook_dir = playbook_dir
        self.configure_playbook = configure_playbook
        self.cleanup_playbook = cleanup_playbook
        self.key_file = key_file
        self.user = user

    def configure(
        self, hosts: Sequence[HostConfigurable], extra_vars: dict[str, Any]
    ) -> EngineRun:
        return self._run_playbook(self.configure_playbook, hosts, extra_vars)

    def cleanup(
        self, hosts: Sequence[HostConfigurable], extra_vars: dict[str, Any]
    ) -> EngineRun:
        return self._run_playbook(self.cleanup_playbook, hosts, extra_vars)

    def _extravars(self, extra_vars: dict[str, Any]) -> dict[str, Any]:
        merged = dict(extra_vars)
        if self.key_file:
            merged.setdefault("ansible_ssh_private_key_file", self.key_file)
        if self.user:
            merged.setdefault("ansible_user", self.user)
        return merged

    def _run_playbook(
        self,
        playbook: str,
        hosts: Sequence[HostConfigurable],
        extra_vars: dict[str, Any],
    ) -> EngineRun:
        inventory = build_inventory(hosts)
        playbook_path = os.path.join(self.playbook_dir, playbook)
        output = OutputStream()
        done: Future[None] = Future()
        cancelled = Event()
        pdir = tempfile.mkdtemp(prefix="clusterm-ansible_")

        def on_event(event: dict[str, Any]) -> bool:
            stdout = event.get("stdout")
            if stdout:
                for line in stdout.splitlines():
                    output.write(line)
            return True

        logger.info("starting playbook %s on %d hosts", playbook_path, len(hosts))
        try:
            thread, runner = ansible_runner.run_async(
                private_data_dir=pdir,
                playbook=playbook_path,
                inventory=inventory,
                extravars=self._extravars(extra_vars),
                forks=max(1, len(hosts)),
                event_handler=on_event,
                cancel_callback=cancelled.is_set,
                quiet=True,
            )
        except Exception:
            output.close()
            shutil.rmtree(pdir, ignore_errors=True)
            raise

        def watch() -> None:
            try:
                thread.join()
                status, rc = runner.status, runner.rc
                logger.info("playbook %s final status: %s (rc=%s)", playbook, status, rc)
                if status == "successful":
                    done.set_result(None)
                elif status == "canceled":
                    done.set_exception(
                        JobCancelledError(f"playbook {playbook} was cancelled")
                    )
                else:
                    done.set_exception(
                        ConfigurationError(
                            f"playbook {playbook} ended with status {status} (rc={rc})"
                        )
                    )
            except Exception as exc:
                if not done.done():
                    done.set_exception(ConfigurationError(str(exc)))
            finally:
                output.close()
                shutil.rmtree(pdir, ignore_errors=True)

        Thread(target=watch, daemon=True).start()
        return EngineRun(output=output, cancel=cancelled.set, done=done)
