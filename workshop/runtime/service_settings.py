from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from config.settings import ServiceDefaults

logger = logging.getLogger(__name__)

ENV_API_URL = "WORKSHOP_API_URL"
ENV_API_KEY = "WORKSHOP_API_KEY"
ENV_DASHBOARD_URL = "WORKSHOP_DASHBOARD_URL"


@dataclass(frozen=True)
class ServiceSettings:
    api_url: str
    api_key: str
    dashboard_url: str


def load_service_settings(
    settings_path: Path,
    defaults: ServiceDefaults = ServiceDefaults(),
    env: Optional[Mapping[str, str]] = None,
) -> ServiceSettings:
    env = os.environ if env is None else env
    resolved = ServiceSettings(
        api_url=defaults.api_url,
        api_key=defaults.api_key,
        dashboard_url=defaults.dashboard_url,
    )

    if not settings_path.exists():
        save_service_settings(settings_path, resolved)
    else:
        try:
            payload = json.loads(settings_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable settings file %s: %s", settings_path, exc)
            payload = {}
        if isinstance(payload, dict):
            resolved = ServiceSettings(
                api_url=str(payload.get("api_url", "")).strip() or resolved.api_url,
                api_key=str(payload.get("api_key", "")).strip() or resolved.api_key,
                dashboard_url=str(payload.get("dashboard_url", "")).strip() or resolved.dashboard_url,
            )

    return ServiceSettings(
        api_url=(env.get(ENV_API_URL) or "").strip() or resolved.api_url,
        api_key=(env.get(ENV_API_KEY) or "").strip() or resolved.api_key,
        dashboard_url=(env.get(ENV_DASHBOARD_URL) or "").strip() or resolved.dashboard_url,
    )


def save_service_settings(settings_path: Path, settings: ServiceSettings) -> None:
    payload = {
        "api_url": settings.api_url.strip(),
        "api_key": settings.api_key.strip(),
        "dashboard_url": settings.dashboard_url.strip(),
    }
    try:
        settings_path.parent.mkdir(parents=True, exist_ok=True)
        settings_path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
    except OSError as exc:
        logger.warning("Could not write settings file %s: %s", settings_path, exc)
