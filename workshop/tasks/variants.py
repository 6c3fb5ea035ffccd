from __future__ import annotations

from typing import Any, Dict

from workshop.tasks.base import TaskVariant
from workshop.tasks.month_sort import MonthSortTask, alphabetical_months


class CountdownMonthsVariant(TaskVariant):
    task_type = "countdown_months"
    title = "Countdown Months"
    unit = "months"
    predicted_key = "predictedMonths"
    actual_key = "actualMonths"

    def build_task(self) -> MonthSortTask:
        return MonthSortTask(alphabetical_months())

    def instructions(self) -> list[str]:
        limit = self.time_limit_sec or 0
        return [
            "List the months in alphabetical order,",
            "each with the number of letters in its name.",
            f"You have {limit} seconds once the timer starts.",
            "How many months will you complete?",
        ]

    def measure(self, elapsed: float, task: MonthSortTask) -> float:
        return task.completed_rows()

    def extra_fields(self, elapsed: float, task: MonthSortTask) -> Dict[str, Any]:
        return {"elapsedSeconds": elapsed}


class MonthSortSecondsVariant(TaskVariant):
    task_type = "month_sort_seconds"
    title = "Month Sort (timed)"
    unit = "seconds"
    predicted_key = "predictedSeconds"
    actual_key = "actualSeconds"

    def __init__(self, time_limit_sec=None) -> None:
        # без лимита: таймер идёт до явного Stop
        super().__init__(time_limit_sec=None)

    def build_task(self) -> MonthSortTask:
        return MonthSortTask(alphabetical_months())

    def instructions(self) -> list[str]:
        return [
            "List all twelve months in alphabetical order,",
            "each with the number of letters in its name.",
            "How many seconds will it take you?",
        ]

    def measure(self, elapsed: float, task: MonthSortTask) -> float:
        return elapsed


VARIANTS = {
    CountdownMonthsVariant.task_type: CountdownMonthsVariant,
    MonthSortSecondsVariant.task_type: MonthSortSecondsVariant,
}


def build_variant(task_type: str, time_limit_sec: int) -> TaskVariant:
    variant_cls = VARIANTS.get(task_type)
    if variant_cls is None:
        raise ValueError(f"Unsupported task_type: {task_type}")
    return variant_cls(time_limit_sec=time_limit_sec)
