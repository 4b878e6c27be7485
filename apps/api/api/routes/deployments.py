from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, Request

from api.schemas.deployment import DeploymentRequest, DeployOut, StatusOut
from services.deploy_runner import DeploymentCoordinator
from services.deploy_runner.types import (
    OUTCOME_FAILED,
    OUTCOME_SUCCESSFUL,
    STATUS_DEPLOYING,
    StatusView,
)

router = APIRouter(tags=["deployments"])


def get_coordinator(request: Request) -> DeploymentCoordinator:
    return request.app.state.coordinator


def status_message(view: StatusView) -> str:
    if view.status == STATUS_DEPLOYING:
        return "Deployment is in progress."
    if view.last_outcome == OUTCOME_SUCCESSFUL:
        return "Last deployment was successful."
    if view.last_outcome == OUTCOME_FAILED:
        return "Last deployment failed."
    return "No deployment has been run yet."


@router.post("/deploy", response_model=DeployOut, response_model_exclude_none=True)
def deploy(
    req: Optional[DeploymentRequest] = Body(default=None),
    coordinator: DeploymentCoordinator = Depends(get_coordinator),
) -> DeployOut:
    """
    Start the deployment script unless one is already running.

    Returns immediately; progress is reported by GET /status.
    """
    result = coordinator.request_deploy(req.params() if req is not None else None)
    if not result.started:
        return DeployOut(
            message="Deployment is still in progress.",
            status=result.status,
            logs=result.logs or "",
        )
    return DeployOut(message="Deployment started successfully.", status=result.status)


@router.get("/status", response_model=StatusOut)
def deployment_status(
    full: Optional[str] = Query(default=None),
    coordinator: DeploymentCoordinator = Depends(get_coordinator),
) -> StatusOut:
    show_full = full == "true"
    view = coordinator.status(full=show_full)
    return StatusOut(status=view.status, message=status_message(view), logs=view.logs)
