import pytest

from workshop.tasks.month_sort import FIELD_COUNT, FIELD_LABEL


class FakeTicker:
    def __init__(self) -> None:
        self.active = False
        self.starts = 0
        self.stops = 0

    def start(self) -> None:
        self.stop()
        self.active = True
        self.starts += 1

    def stop(self) -> None:
        if self.active:
            self.stops += 1
        self.active = False


class RecordingSink:
    def __init__(self) -> None:
        self.records = []

    def __call__(self, record) -> None:
        self.records.append(record)


@pytest.fixture
def ticker():
    return FakeTicker()


@pytest.fixture
def sink():
    return RecordingSink()


def _fill_row(task, index, label=None, count=None):
    spec = task.rows[index]
    task.set_field(index, FIELD_LABEL, spec.month if label is None else label)
    task.set_field(index, FIELD_COUNT, str(spec.letter_count) if count is None else count)


@pytest.fixture
def fill_row():
    return _fill_row
