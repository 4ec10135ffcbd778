from __future__ import annotations

import logging
from copy import deepcopy
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

PACKAGE_DIR = Path(__file__).resolve().parent
"""Directory holding the ``auditpro`` package."""

PROJECT_DIR = PACKAGE_DIR.parent
LOGGER = logging.getLogger(__name__)

SUPPORTED_REPORT_LANGUAGES: tuple[str, ...] = ("pt", "en")
_LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULT_CONFIG: dict[str, Any] = {
    "server": {"host": "0.0.0.0", "port": 8000},
    "api": {"base_path": "/api"},
    "storage": {
        "db_path": "data/auditpro.db",
        "seed_demo_data": True,
    },
    "report": {
        "language": "pt",
        "brand": "AuditPro 360",
    },
    "logging": {"level": "INFO"},
}


def documented_default_config() -> dict[str, Any]:
    """Return runtime defaults in the shape documented by config.example.yaml."""
    return deepcopy(DEFAULT_CONFIG)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _resolve_config_path(path_text: str, config_path: Path) -> Path:
    path = Path(path_text)
    if path.is_absolute():
        return path
    return config_path.resolve().parent / path


@dataclass(slots=True)
class ServerConfig:
    host: str
    port: int

    def __post_init__(self) -> None:
        if not isinstance(self.port, int) or not (1 <= self.port <= 65535):
            raise ValueError(f"server.port must be 1-65535, got {self.port!r}")


@dataclass(slots=True)
class APIConfig:
    base_path: str

    def __post_init__(self) -> None:
        base = str(self.base_path or "").strip()
        if not base.startswith("/"):
            raise ValueError(f"api.base_path must start with '/', got {self.base_path!r}")
        object.__setattr__(self, "base_path", base.rstrip("/") or "")


@dataclass(slots=True)
class StorageConfig:
    db_path: Path
    seed_demo_data: bool


@dataclass(slots=True)
class ReportConfig:
    language: str
    brand: str

    def __post_init__(self) -> None:
        lang = str(self.language or "").strip().lower()
        if lang not in SUPPORTED_REPORT_LANGUAGES:
            LOGGER.warning("report.language=%r is not supported; falling back to 'pt'", lang)
            lang = "pt"
        object.__setattr__(self, "language", lang)
        brand = str(self.brand or "").strip()
        object.__setattr__(self, "brand", brand or str(DEFAULT_CONFIG["report"]["brand"]))


@dataclass(slots=True)
class LoggingConfig:
    level: str

    def __post_init__(self) -> None:
        level = str(self.level or "").strip().upper()
        if level not in _LOG_LEVELS:
            LOGGER.warning("logging.level=%r is not a known level; using INFO", self.level)
            level = "INFO"
        object.__setattr__(self, "level", level)


@dataclass(slots=True)
class AppConfig:
    server: ServerConfig
    api: APIConfig
    storage: StorageConfig
    report: ReportConfig
    logging: LoggingConfig
    config_path: Path


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path} must contain a YAML object at the top level.")
        return data


def load_config(config_path: Path | None = None) -> AppConfig:
    path = config_path or (PROJECT_DIR / "config.yaml")
    path = path.resolve()
    override = _read_config_file(path)
    merged = _deep_merge(DEFAULT_CONFIG, override)

    try:
        server_port = int(merged["server"]["port"])
    except (TypeError, ValueError):
        raise ValueError(
            f"server.port must be an integer, got {merged['server']['port']!r}"
        ) from None

    storage_cfg = merged.get("storage") or {}
    db_path_raw = storage_cfg.get("db_path")
    if not isinstance(db_path_raw, str) or not db_path_raw.strip():
        raise ValueError("storage.db_path must be a non-empty path.")

    app_config = AppConfig(
        server=ServerConfig(host=str(merged["server"]["host"]), port=server_port),
        api=APIConfig(base_path=str(merged["api"]["base_path"])),
        storage=StorageConfig(
            db_path=_resolve_config_path(db_path_raw, path),
            seed_demo_data=bool(storage_cfg.get("seed_demo_data", True)),
        ),
        report=ReportConfig(
            language=str(merged["report"].get("language", "pt")),
            brand=str(merged["report"].get("brand", "")),
        ),
        logging=LoggingConfig(level=str(merged["logging"].get("level", "INFO"))),
        config_path=path,
    )
    LOGGER.info(
        "Loaded config=%s db_path=%s api_base=%s",
        app_config.config_path,
        app_config.storage.db_path,
        app_config.api.base_path,
    )
    return app_config
