from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass(frozen=True)
class Settings:
    # Paths
    sources_dir: str = "./data/sources"
    output_path: str = "./data/error_database_aggregate.csv"
    status_path: str = "./data/readme_status.json"
    catalog_path: str | None = None

    # Logging
    log_level: str = "INFO"
    log_dir: str | None = None

    # Notification
    recipients: tuple[str, ...] = field(default_factory=tuple)
    smtp_host: str | None = None
    smtp_port: int = 25
    smtp_sender: str = "aet-updates@localhost"
    update_frequency_hours: int = 2


def _read_yaml_config(path: Path) -> dict:
    if not path.is_file():
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        return {}
    return data


def _env_get(name: str) -> str | None:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        return None
    return v.strip()


def _split_list(value) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = value.split(",")
    return tuple(str(v).strip() for v in value if str(v).strip())


def load_settings(config_path: str | None = None) -> Settings:
    """
    Priority: ENV > config file > defaults

    The config file is YAML; `AET_CONFIG` names it when `config_path` is not
    given. It may also hold the source catalog under `sources` (see
    catalog.load_catalog).
    """
    config_path = config_path or _env_get("AET_CONFIG")
    cfg: dict = _read_yaml_config(Path(config_path)) if config_path else {}
    defaults = Settings()

    merged = {
        "sources_dir": cfg.get("sources_dir", defaults.sources_dir),
        "output_path": cfg.get("output_path", defaults.output_path),
        "status_path": cfg.get("status_path", defaults.status_path),
        "catalog_path": cfg.get("catalog_path", config_path if "sources" in cfg else None),
        "log_level": cfg.get("log_level", defaults.log_level),
        "log_dir": cfg.get("log_dir", defaults.log_dir),
        "recipients": cfg.get("recipients", defaults.recipients),
        "smtp_host": cfg.get("smtp_host", defaults.smtp_host),
        "smtp_port": cfg.get("smtp_port", defaults.smtp_port),
        "smtp_sender": cfg.get("smtp_sender", defaults.smtp_sender),
        "update_frequency_hours": cfg.get("update_frequency_hours", defaults.update_frequency_hours),
    }

    env = {
        "sources_dir": _env_get("AET_SOURCES_DIR"),
        "output_path": _env_get("AET_OUTPUT_PATH"),
        "status_path": _env_get("AET_STATUS_PATH"),
        "catalog_path": _env_get("AET_CATALOG_PATH"),
        "log_level": _env_get("AET_LOG_LEVEL"),
        "log_dir": _env_get("AET_LOG_DIR"),
        "recipients": _env_get("AET_RECIPIENTS"),
        "smtp_host": _env_get("AET_SMTP_HOST"),
        "smtp_port": _env_get("AET_SMTP_PORT"),
        "smtp_sender": _env_get("AET_SMTP_SENDER"),
        "update_frequency_hours": _env_get("AET_UPDATE_FREQUENCY_HOURS"),
    }
    for k, v in env.items():
        if v is not None:
            merged[k] = v

    return Settings(
        sources_dir=str(merged["sources_dir"]),
        output_path=str(merged["output_path"]),
        status_path=str(merged["status_path"]),
        catalog_path=merged["catalog_path"],
        log_level=str(merged["log_level"]),
        log_dir=merged["log_dir"],
        recipients=_split_list(merged["recipients"]),
        smtp_host=merged["smtp_host"],
        smtp_port=int(merged["smtp_port"]),
        smtp_sender=str(merged["smtp_sender"]),
        update_frequency_hours=int(merged["update_frequency_hours"]),
    )
