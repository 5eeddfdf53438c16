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
"""FastAPI entrypoint for the commissioning service."""

import logging
from contextlib import asynccontextmanager

from fastapi import Body, FastAPI, HTTPException

from clusterm.app.api.schemas import (
    ActiveJobResponse,
    CommissionRequest,
    FailedRowResponse,
    JobResponse,
    NodeImportResponse,
    NodeResponse,
)
from clusterm.app.application.cluster_manager import ClusterManager
from clusterm.app.application.configuration import ConfigurationEngine
from clusterm.app.application.node_import_service import NodeImportService
from clusterm.app.config import Settings
from clusterm.app.domain.errors import (
    ActiveJobConflictError,
    CommissionValidationError,
    StatusTransitionError,
    TopologyError,
)
from clusterm.app.domain.models import JobSnapshot, Node
from clusterm.app.infrastructure.in_memory_inventory import InMemoryInventory
from clusterm.app.infrastructure.in_memory_node_registry import InMemoryNodeRegistry
from clusterm.app.infrastructure.simulated_engine import SimulatedConfigurationEngine

settings = Settings.from_env()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    manager.gate.shutdown(wait=False)
    logger.info("active job executor shut down")


app = FastAPI(
    title="Cluster Commissioning Manager",
    version="0.1.0",
    lifespan=lifespan,
)


def build_engine(config: Settings) -> ConfigurationEngine:
    if config.engine_mode == "ansible":
        from clusterm.app.infrastructure.ansible_engine import (
            AnsibleConfigurationEngine,
        )

        return AnsibleConfigurationEngine(
            playbook_dir=config.ansible_playbook_dir,
            configure_playbook=config.ansible_configure_playbook,
            cleanup_playbook=config.ansible_cleanup_playbook,
            key_file=config.ansible_key_file,
            user=config.ansible_user,
        )
    return SimulatedConfigurationEngine(
        delay_ms=config.simulated_delay_ms, fail=config.simulated_fail
    )


inventory = InMemoryInventory()
registry = InMemoryNodeRegistry(inventory)
manager = ClusterManager(
    registry=registry,
    inventory=inventory,
    engine=build_engine(settings),
    global_extra_vars=settings.global_extra_vars,
)
node_import_service = NodeImportService(registry=registry, inventory=inventory)


def to_job_response(job: JobSnapshot) -> JobResponse:
    """Convert job snapshot to API response."""
    return JobResponse(
        job_id=job.job_id,
        description=job.description,
        status=job.status.value,
        created_at=job.created_at,
        completed_at=job.completed_at,
        error=job.error,
        logs=job.logs,
    )


def to_node_response(node: Node) -> NodeResponse:
    try:
        status = inventory.get_asset_status(node.name).value
    except LookupError:
        status = None
    return NodeResponse(
        name=node.name,
        mgmt_address=node.mgmt_address,
        tag=node.tag,
        discovered=node.discovered,
        status=status,
        group=node.config.group if node.config else "",
        vars=dict(node.config.vars) if node.config else {},
    )


@app.get("/health")
def health() -> dict[str, str]:
    """Simple health endpoint."""
    return {"status": "ok"}


@app.post("/api/v1/nodes/import", response_model=NodeImportResponse)
def import_nodes(
    csv_content: str = Body(..., media_type="text/plain")
) -> NodeImportResponse:
    """Replace the node inventory from CSV text."""
    try:
        with manager.gate.hold("nodeImport"):
            result = node_import_service.import_csv(csv_content=csv_content)
    except ActiveJobConflictError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    logger.info(
        "imported %d nodes, %d rows failed", len(result.nodes), len(result.failed_rows)
    )
    return NodeImportResponse(
        nodes=[to_node_response(node) for node in result.nodes],
        failed_rows=[
            FailedRowResponse(
                row_number=row.row_number,
                row=row.row,
                error=row.error,
            )
            for row in result.failed_rows
        ],
    )


@app.get("/api/v1/nodes", response_model=list[NodeResponse])
def list_nodes() -> list[NodeResponse]:
    """List known nodes with their asset status."""
    return [to_node_response(node) for node in registry.nodes()]


@app.post("/api/v1/commission/nodes", response_model=JobResponse, status_code=202)
def commission_nodes(payload: CommissionRequest) -> JobResponse:
    """Accept a commission request; provisioning runs in background."""
    try:
        event = manager.new_commission_event(
            node_names=payload.nodes,
            extra_vars=payload.extra_vars,
            host_group=payload.host_group,
        )
        job = event.process()
    except ActiveJobConflictError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except CommissionValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except (TopologyError, StatusTransitionError) as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    logger.info("accepted %s", event)
    return to_job_response(job)


@app.get("/api/v1/jobs/active", response_model=ActiveJobResponse)
def active_job() -> ActiveJobResponse:
    """Return the active job if present."""
    job = manager.active_job()
    if job is None:
        return ActiveJobResponse(active=False, job=None)
    return ActiveJobResponse(active=True, job=to_job_response(job))


@app.get("/api/v1/jobs/last", response_model=JobResponse)
def last_job() -> JobResponse:
    """Return the most recently finished job."""
    job = manager.last_job()
    if job is None:
        raise HTTPException(status_code=404, detail="No finished job")
    return to_job_response(job)


@app.post("/api/v1/jobs/active/cancel", response_model=ActiveJobResponse)
def cancel_active_job() -> ActiveJobResponse:
    """Request cancellation of the active job."""
    if not manager.cancel_active_job():
        raise HTTPException(status_code=409, detail="No active job to cancel")
    return active_job()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
