from dataclasses import dataclass


@dataclass(frozen=True)
class WindowConfig:
    width: int = 1280
    height: int = 720
    fps: int = 60
    title: str = "Planning Fallacy Workshop"


@dataclass(frozen=True)
class WorkshopConfig:
    tick_ms: int = 100
    countdown_limit_sec: int = 60
    offered_variants: tuple = ("countdown_months",)  # "countdown_months" / "month_sort_seconds"
    settings_file: str = "service_settings.json"


@dataclass(frozen=True)
class ServiceDefaults:
    api_url: str = "http://127.0.0.1:8000"
    api_key: str = ""
    dashboard_url: str = "http://127.0.0.1:8501"
    timeout_sec: float = 2.5
