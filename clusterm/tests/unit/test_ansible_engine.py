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
"""Unit tests for the ansible-runner engine adapter."""

from threading import Thread

import pytest

from clusterm.app.domain.errors import ConfigurationError, JobCancelledError
from clusterm.app.domain.models import HostConfig
from clusterm.app.infrastructure import ansible_engine
from clusterm.app.infrastructure.ansible_engine import (
    AnsibleConfigurationEngine,
    build_inventory,
)


class FakeRunner:
    def __init__(self, status: str, rc: int):
        self.status = status
        self.rc = rc


def fake_run_async(captured: dict, status: str, rc: int):
    def run_async(**kwargs):
        captured.update(kwargs)
        kwargs["event_handler"]({"stdout": "PLAY [service-worker]\nok: [n1]"})
        kwargs["event_handler"]({"event": "runner_on_start"})
        thread = Thread(target=lambda: None)
        thread.start()
        return thread, FakeRunner(status, rc)

    return run_async


def worker_host() -> HostConfig:
    return HostConfig(
        tag="n1",
        address="10.0.0.11",
        group="service-worker",
        vars={"etcd_master_addr": "10.0.0.5", "etcd_master_name": "master-1"},
    )


def test_build_inventory_groups_hosts():
    inventory = build_inventory(
        [worker_host(), HostConfig(tag="m2", address="10.0.0.6", group="service-master")]
    )

    children = inventory["all"]["children"]
    assert children["service-worker"]["hosts"]["n1"] == {
        "ansible_host": "10.0.0.11",
        "etcd_master_addr": "10.0.0.5",
        "etcd_master_name": "master-1",
    }
    assert children["service-master"]["hosts"]["m2"] == {"ansible_host": "10.0.0.6"}


def test_configure_runs_configure_playbook(monkeypatch):
    captured: dict = {}
    monkeypatch.setattr(
        ansible_engine.ansible_runner,
        "run_async",
        fake_run_async(captured, "successful", 0),
    )
    engine = AnsibleConfigurationEngine(
        playbook_dir="/opt/playbooks", key_file="/keys/id_rsa", user="clusterm"
    )

    run = engine.configure([worker_host()], {"env": "lab"})

    assert run.done.result(timeout=5) is None
    assert list(run.output) == ["PLAY [service-worker]", "ok: [n1]"]
    assert captured["playbook"] == "/opt/playbooks/site.yml"
    assert captured["extravars"] == {
        "env": "lab",
        "ansible_ssh_private_key_file": "/keys/id_rsa",
        "ansible_user": "clusterm",
    }
    assert captured["forks"] == 1
    assert "n1" in captured["inventory"]["all"]["children"]["service-worker"]["hosts"]


def test_cleanup_uses_cleanup_playbook(monkeypatch):
    captured: dict = {}
    monkeypatch.setattr(
        ansible_engine.ansible_runner,
        "run_async",
        fake_run_async(captured, "successful", 0),
    )
    engine = AnsibleConfigurationEngine(playbook_dir="/opt/playbooks")

    engine.cleanup([worker_host()], {}).done.result(timeout=5)

    assert captured["playbook"] == "/opt/playbooks/cleanup.yml"
    assert captured["extravars"] == {}


@pytest.mark.parametrize(
    ("status", "error_type"),
    [("failed", ConfigurationError), ("canceled", JobCancelledError)],
)
def test_unsuccessful_runner_status_fails_run(monkeypatch, status, error_type):
    monkeypatch.setattr(
        ansible_engine.ansible_runner,
        "run_async",
        fake_run_async({}, status, 2),
    )
    engine = AnsibleConfigurationEngine(playbook_dir="/opt/playbooks")

    run = engine.configure([worker_host()], {})

    with pytest.raises(error_type):
        run.done.result(timeout=5)


def test_cancel_is_reported_through_cancel_callback(monkeypatch):
    captured: dict = {}
    monkeypatch.setattr(
        ansible_engine.ansible_runner,
        "run_async",
        fake_run_async(captured, "successful", 0),
    )
    engine = AnsibleConfigurationEngine(playbook_dir="/opt/playbooks")

    run = engine.configure([worker_host()], {})
    assert captured["cancel_callback"]() is False
    run.cancel()

    assert captured["cancel_callback"]() is True
