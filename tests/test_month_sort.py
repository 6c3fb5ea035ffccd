import pytest

from workshop.tasks import CountdownMonthsVariant, MonthSortSecondsVariant
from workshop.tasks.month_sort import (
    FIELD_COUNT,
    FIELD_LABEL,
    MonthSortTask,
    alphabetical_months,
    parse_count,
)


def test_orders():
    assert alphabetical_months()[:3] == ["April", "August", "December"]
    assert alphabetical_months()[-1] == "September"


def test_both_variants_use_alphabetical_order():
    countdown = CountdownMonthsVariant(time_limit_sec=60).build_task()
    timed = MonthSortSecondsVariant().build_task()

    assert [row.month for row in countdown.rows] == alphabetical_months()
    assert [row.month for row in timed.rows] == alphabetical_months()


def test_rows_carry_letter_counts():
    task = MonthSortTask(alphabetical_months())

    assert len(task.rows) == 12
    assert task.rows[0].month == "April"
    assert task.rows[0].letter_count == 5
    assert task.rows[-1].month == "September"
    assert task.rows[-1].letter_count == 9


def test_only_first_row_is_enterable_at_start():
    task = MonthSortTask(alphabetical_months())

    assert task.unlocked_index == 0
    assert task.is_enterable(0)
    assert not task.is_enterable(1)
    assert not task.set_field(1, FIELD_LABEL, "August")
    assert task.inputs[1].label == ""


def test_correct_row_unlocks_next(fill_row):
    task = MonthSortTask(alphabetical_months())

    fill_row(task, 0)

    assert task.unlocked_index == 1
    assert task.is_enterable(1)
    assert not task.is_enterable(2)


def test_label_match_is_case_sensitive(fill_row):
    task = MonthSortTask(alphabetical_months())

    fill_row(task, 0, label="april")
    assert task.unlocked_index == 0

    task.set_field(0, FIELD_LABEL, "April ")
    assert task.unlocked_index == 0

    task.set_field(0, FIELD_LABEL, "April")
    assert task.unlocked_index == 1


def test_count_must_match_exactly(fill_row):
    task = MonthSortTask(alphabetical_months())

    fill_row(task, 0, count="6")
    assert task.unlocked_index == 0

    task.set_field(0, FIELD_COUNT, "5")
    assert task.unlocked_index == 1


def test_unlock_index_never_decreases(fill_row):
    task = MonthSortTask(alphabetical_months())
    fill_row(task, 0)
    fill_row(task, 1)
    assert task.unlocked_index == 2

    task.set_field(0, FIELD_LABEL, "Apr")

    assert task.unlocked_index == 2
    assert task.is_enterable(1)
    assert not task.row_matches(0)


def test_unlock_index_is_bounded_by_last_row(fill_row):
    task = MonthSortTask(alphabetical_months())
    history = []
    for index in range(len(task.rows)):
        fill_row(task, index)
        history.append(task.unlocked_index)

    assert history == sorted(history)
    assert task.unlocked_index == task.last_index == 11
    assert task.completed_rows() == 12


def test_count_field_keeps_digits_only():
    task = MonthSortTask(alphabetical_months())

    task.set_field(0, FIELD_COUNT, "5a9x1")

    assert task.inputs[0].count == "59"


def test_typing_and_erasing():
    task = MonthSortTask(["May"])

    for ch in "Mayy":
        task.type_char(0, FIELD_LABEL, ch)
    task.erase_char(0, FIELD_LABEL)
    task.type_char(0, FIELD_COUNT, "3")

    assert task.row_matches(0)
    assert task.unlocked_index == 0
    assert task.completed_rows() == 1


def test_answers_cover_unlocked_rows(fill_row):
    task = MonthSortTask(alphabetical_months())
    fill_row(task, 0)
    task.set_field(1, FIELD_LABEL, "Augst")

    answers = task.answers()

    assert [(a.month, a.letter_count) for a in answers] == [("April", 5), ("Augst", None)]


def test_unknown_field_raises():
    task = MonthSortTask(alphabetical_months())

    with pytest.raises(ValueError):
        task.set_field(0, "notes", "x")


def test_empty_order_raises():
    with pytest.raises(ValueError):
        MonthSortTask([])


@pytest.mark.parametrize("text,expected", [("5", 5), (" 12 ", 12), ("", None), ("5.0", None), ("-5", None)])
def test_parse_count(text, expected):
    assert parse_count(text) == expected
