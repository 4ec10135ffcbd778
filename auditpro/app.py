"""Runtime wiring for the AuditPro API: storage -> workspace -> orchestrator -> routes.

Boundary note for maintainers:
- Keep this module focused on wiring, not workflow rules.
- Report assembly belongs in `report_assembler.py` / `orchestrator.py`.
- API schemas belong in `api_models.py`.
"""

from __future__ import annotations

import argparse
import logging
import os
from collections.abc import Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

import uvicorn
from fastapi import FastAPI

from .config import AppConfig, load_config
from .database import AuditDB
from .orchestrator import ReportOrchestrator
from .routes import create_router
from .seed import seed_defaults, seed_demo_data
from .workspace import Workspace

LOGGER = logging.getLogger(__name__)

CONFIG_ENV_VAR = "AUDITPRO_CONFIG"


@dataclass(slots=True)
class RuntimeState:
    config: AppConfig
    workspace: Workspace
    orchestrator: ReportOrchestrator
    db: AuditDB | None = None
    clock: Callable[[], date] = field(default=date.today)

    def today(self) -> date:
        return self.clock()


def build_runtime(config: AppConfig) -> RuntimeState:
    """Open the database, seed it and load the workspace.

    Demo data only goes into an empty database and only when enabled; the
    bootstrap administrator and company settings are always ensured.
    """
    db = AuditDB(config.storage.db_path)
    if config.storage.seed_demo_data:
        seed_demo_data(db)
    seed_defaults(db)
    workspace = Workspace(db)
    if not workspace.load():
        LOGGER.warning("Starting with in-memory data only; database at %s", db.db_path)
    orchestrator = ReportOrchestrator(
        workspace,
        lang=config.report.language,
        brand=config.report.brand,
    )
    return RuntimeState(config=config, workspace=workspace, orchestrator=orchestrator, db=db)


def create_app(config_path: Path | None = None, *, config: AppConfig | None = None) -> FastAPI:
    config = config or load_config(config_path)
    runtime = build_runtime(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            yield
        finally:
            if runtime.db is not None:
                try:
                    runtime.db.close()
                except Exception:
                    LOGGER.warning("Error closing AuditPro DB", exc_info=True)

    app = FastAPI(title="AuditPro", lifespan=lifespan)
    app.state.runtime = runtime
    app.include_router(create_router(runtime))
    return app


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the AuditPro API server")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Path to config YAML (default: ${CONFIG_ENV_VAR} or config.yaml)",
    )
    args = parser.parse_args()

    config_path = args.config
    if config_path is None and os.getenv(CONFIG_ENV_VAR):
        config_path = Path(os.environ[CONFIG_ENV_VAR])

    config = load_config(config_path)
    level = config.logging.level
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    runtime_app = create_app(config=config)
    runtime: RuntimeState = runtime_app.state.runtime
    uvicorn.run(
        runtime_app,
        host=runtime.config.server.host,
        port=runtime.config.server.port,
        log_level=level.lower(),
    )


if __name__ == "__main__":
    main()
