from __future__ import annotations

import logging
import os
from typing import List, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from api.routes import router as api_router
from services.deploy_runner import DeploymentCoordinator
from services.deploy_runner.config import env_int

LOGGER = logging.getLogger(__name__)


def _parse_origins(raw: str) -> List[str]:
    # Accept comma-separated list. Ignore empties.
    return [o.strip() for o in (raw or "").split(",") if o.strip()]


def create_app(coordinator: Optional[DeploymentCoordinator] = None) -> FastAPI:
    app = FastAPI(title="Deployer API", version="0.1.0")
    app.state.coordinator = coordinator or DeploymentCoordinator()

    origins = _parse_origins(os.getenv("CORS_ALLOW_ORIGINS", ""))
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(api_router)

    @app.get("/", response_class=PlainTextResponse)
    def index() -> str:
        return "Deployer service available"

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    return app


def run() -> None:
    logging.basicConfig(
        level=(os.getenv("LOG_LEVEL") or "INFO").strip().upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    host = (os.getenv("HOST") or "0.0.0.0").strip()
    port = env_int("PORT", 3000)
    LOGGER.info("deployer listening on %s:%s", host, port)
    uvicorn.run(create_app(), host=host, port=port, reload=False)


if __name__ == "__main__":
    run()
