from __future__ import annotations

from typing import Any, Dict, Optional

from workshop.tasks.month_sort import MonthSortTask


class TaskVariant:
    task_type: str = "BASE"
    title: str = ""
    unit: str = ""
    predicted_key: str = ""
    actual_key: str = ""

    def __init__(self, time_limit_sec: Optional[int] = None) -> None:
        self.time_limit_sec = time_limit_sec

    @property
    def time_limit_tenths(self) -> Optional[int]:
        if self.time_limit_sec is None:
            return None
        return int(self.time_limit_sec) * 10

    def build_task(self) -> MonthSortTask:
        raise NotImplementedError

    def instructions(self) -> list[str]:
        raise NotImplementedError

    def measure(self, elapsed: float, task: MonthSortTask) -> float:
        raise NotImplementedError

    def extra_fields(self, elapsed: float, task: MonthSortTask) -> Dict[str, Any]:
        return {}
