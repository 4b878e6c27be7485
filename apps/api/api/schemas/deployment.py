from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field, field_validator


DeploymentStatusOut = Literal["idle", "deploying", "unknown"]


class DeploymentRequest(BaseModel):
    """
    Optional parameters for a deployment run.

    Provided values are forwarded to the deployment script as
    ``--container-name``/``--image-name``/``--s3-bucket``/``--domain-name``
    unless DEPLOY_FORWARD_PARAMS is disabled. Unknown fields are ignored.
    """

    container_name: Optional[str] = Field(
        default=None, description="Container to (re)start"
    )
    image_name: Optional[str] = Field(default=None, description="Image reference")
    s3_bucket: Optional[str] = Field(
        default=None, description="Bucket holding certificates/config"
    )
    domain_name: Optional[str] = Field(default=None, description="Public domain")

    @field_validator(
        "container_name", "image_name", "s3_bucket", "domain_name", mode="before"
    )
    @classmethod
    def _coerce_scalar(cls, value: Any) -> Optional[str]:
        # Any JSON value is accepted; scalars become strings, the rest is dropped.
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (str, int, float)):
            return str(value)
        return None

    @field_validator("container_name", "image_name", "s3_bucket", "domain_name")
    @classmethod
    def _strip(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None

    def params(self) -> Dict[str, Optional[str]]:
        return self.model_dump()


class DeployOut(BaseModel):
    message: str
    status: DeploymentStatusOut
    logs: Optional[str] = None


class StatusOut(BaseModel):
    status: DeploymentStatusOut
    message: str
    logs: str
