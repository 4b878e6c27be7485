from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .service import DeploymentCoordinator

__all__ = ["DeploymentCoordinator"]


def __getattr__(name: str):
    if name == "DeploymentCoordinator":
        from .service import DeploymentCoordinator

        return DeploymentCoordinator
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
