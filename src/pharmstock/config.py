from __future__ import annotations

from pathlib import Path

import yaml

from pharmstock.models import AppConfig


def load_config(config_path: str | Path | None = None) -> AppConfig:
    if config_path is None:
        return AppConfig()
    path = Path(config_path)
    payload = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    return AppConfig.model_validate(payload)
