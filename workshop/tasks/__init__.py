from workshop.tasks.base import TaskVariant
from workshop.tasks.month_sort import MonthSortTask
from workshop.tasks.variants import CountdownMonthsVariant, MonthSortSecondsVariant, build_variant

__all__ = ["TaskVariant", "MonthSortTask", "CountdownMonthsVariant", "MonthSortSecondsVariant", "build_variant"]
