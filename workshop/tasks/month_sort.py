from dataclasses import dataclass
from typing import List, Optional, Sequence

from workshop.runtime.models import RowAnswer

MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

FIELD_LABEL = "label"
FIELD_COUNT = "count"

MAX_LABEL_LEN = 12
MAX_COUNT_LEN = 2


def alphabetical_months() -> List[str]:
    return sorted(MONTHS)


def parse_count(text: str) -> Optional[int]:
    text = text.strip()
    if not text or not text.isdigit():
        return None
    return int(text)


@dataclass(frozen=True)
class MonthRowSpec:
    month: str
    letter_count: int


@dataclass
class MonthRowInput:
    label: str = ""
    count: str = ""


class MonthSortTask:
    """
    Таблица месяцев: в каждой строке название месяца и число букв в нём.

    Строка i+1 открывается только после того, как строка i заполнена
    правильно (точное совпадение названия с учётом регистра и точное число).
    unlocked_index только растёт и не выходит за последнюю строку.
    """

    def __init__(self, order: Sequence[str]) -> None:
        if not order:
            raise ValueError("month order must not be empty")
        self.rows: List[MonthRowSpec] = [MonthRowSpec(month=m, letter_count=len(m)) for m in order]
        self.inputs: List[MonthRowInput] = [MonthRowInput() for _ in self.rows]
        self.unlocked_index: int = 0

    @property
    def last_index(self) -> int:
        return len(self.rows) - 1

    def is_enterable(self, index: int) -> bool:
        return 0 <= index <= self.unlocked_index

    def row_matches(self, index: int) -> bool:
        spec = self.rows[index]
        entry = self.inputs[index]
        return entry.label == spec.month and parse_count(entry.count) == spec.letter_count

    def set_field(self, index: int, field: str, text: str) -> bool:
        if not self.is_enterable(index):
            return False
        entry = self.inputs[index]
        if field == FIELD_LABEL:
            entry.label = text[:MAX_LABEL_LEN]
        elif field == FIELD_COUNT:
            entry.count = "".join(ch for ch in text if ch.isdigit())[:MAX_COUNT_LEN]
        else:
            raise ValueError(f"Unknown field: {field}")
        self._advance_unlock()
        return True

    def type_char(self, index: int, field: str, char: str) -> bool:
        if not self.is_enterable(index):
            return False
        return self.set_field(index, field, self.field_text(index, field) + char)

    def erase_char(self, index: int, field: str) -> bool:
        if not self.is_enterable(index):
            return False
        return self.set_field(index, field, self.field_text(index, field)[:-1])

    def field_text(self, index: int, field: str) -> str:
        entry = self.inputs[index]
        return entry.label if field == FIELD_LABEL else entry.count

    def completed_rows(self) -> int:
        return sum(1 for i in range(len(self.rows)) if self.row_matches(i))

    def answers(self) -> List[RowAnswer]:
        return [
            RowAnswer(month=entry.label, letter_count=parse_count(entry.count))
            for entry in self.inputs[: self.unlocked_index + 1]
        ]

    def _advance_unlock(self) -> None:
        while self.unlocked_index < self.last_index and self.row_matches(self.unlocked_index):
            self.unlocked_index += 1
