import math
import sqlite3

import pytest

from app.aggregate import (
    ERROR_BUCKETS,
    DashboardStats,
    bucket_index,
    build_summary,
    coerce_number,
    compute_stats,
    error_distribution,
    load_summary,
    table_row,
)
from app.db import ensure_db, insert_attempt


def countdown(predicted, actual, **extra):
    doc = {
        "taskType": "countdown_months",
        "userId": "u",
        "predictedMonths": predicted,
        "actualMonths": actual,
        "timestamp": "2026-10-18T10:00:00.000Z",
    }
    doc.update(extra)
    return doc


def test_empty_input_gives_zero_stats():
    summary = build_summary([])

    assert summary.stats == DashboardStats()
    assert summary.rows == []
    assert all(b["count"] == 0 for b in summary.distribution())


def test_all_invalid_input_gives_zero_stats():
    summary = build_summary([countdown("abc", 3), countdown(4, None), countdown(None, None)])

    assert summary.stats == DashboardStats()
    assert summary.invalid_records == 3
    assert summary.rows == []


def test_other_task_types_are_ignored():
    docs = [
        {"taskType": "month_sort_seconds", "predictedSeconds": 30, "actualSeconds": 42.3},
        {"predictedSeconds": 10, "actualSeconds": 12},
        countdown(5, 5),
    ]

    summary = build_summary(docs)

    assert summary.ignored_variants == 2
    assert len(summary.rows) == 1
    assert summary.stats.total_participants == 1
    assert len(summary.table()) == 1


def test_string_numbers_are_coerced():
    summary = build_summary([countdown("5", "7")])

    row = summary.rows[0]
    assert row.predicted == 5.0
    assert row.actual == 7.0
    assert row.error == 2.0
    assert row.error_percentage == pytest.approx(40.0)


def test_stats():
    docs = [countdown(5, 7), countdown(6, 4), countdown(5, 5), countdown(4, 6)]

    stats = build_summary(docs).stats

    assert stats.total_participants == 4
    assert stats.avg_error == pytest.approx((2 + 2 + 0 + 2) / 4)
    assert stats.avg_predicted == pytest.approx(5.0)
    assert stats.avg_actual == pytest.approx(5.5)
    assert stats.underestimators == 2
    assert stats.overestimators == 1
    assert stats.perfect_predictions == 1
    assert stats.share(stats.underestimators) == 50


def test_compute_stats_empty():
    assert compute_stats([]) == DashboardStats()
    assert DashboardStats().share(3) == 0


@pytest.mark.parametrize(
    "error,label",
    [
        (-100, "-6 or less"),
        (-5.01, "-6 or less"),
        (-5, "-5 to -4"),
        (-3.5, "-5 to -4"),
        (-3, "-3 to -2"),
        (-1, "-1"),
        (-0.2, "-1"),
        (0, "Perfect (0)"),
        (0.9, "Perfect (0)"),
        (1, "+1"),
        (2, "+2 to +3"),
        (3.99, "+2 to +3"),
        (4, "+4 to +5"),
        (6, "+6 or more"),
        (1e9, "+6 or more"),
        (-math.inf, "-6 or less"),
        (math.inf, "+6 or more"),
    ],
)
def test_bucket_index(error, label):
    assert ERROR_BUCKETS[bucket_index(error)][0] == label


def test_buckets_are_total_and_exclusive():
    for tenths in range(-120, 121):
        error = tenths / 10
        containing = [idx for idx, (_, low, high) in enumerate(ERROR_BUCKETS) if low <= error < high]
        assert containing == [bucket_index(error)]


def test_bucket_index_rejects_nan():
    with pytest.raises(ValueError):
        bucket_index(math.nan)


def test_distribution_counts_and_colors():
    summary = build_summary([countdown(5, 5), countdown(5, 8), countdown(5, 1), countdown(3, 3)])

    dist = {b["range"]: b for b in error_distribution(summary.rows)}

    assert dist["Perfect (0)"]["count"] == 2
    assert dist["+2 to +3"]["count"] == 1
    assert dist["-5 to -4"]["count"] == 1
    assert sum(b["count"] for b in dist.values()) == 4
    assert dist["Perfect (0)"]["color"] == "#f59e0b"
    assert dist["+1"]["color"] == "#10b981"
    assert dist["-1"]["color"] == "#ef4444"


def test_pairs():
    summary = build_summary([countdown(5, 7)])

    assert summary.pairs() == [{"predicted": 5.0, "actual": 7.0, "error": 2.0}]


def test_table_rows():
    summary = build_summary([countdown(5, 7), countdown(5, 5), countdown(4, 3, timestamp=None)])

    better, perfect, worse = summary.table()

    assert better["Predicted"] == "5 months"
    assert better["Difference"] == "+2"
    assert better["Accuracy"] == "40% off"
    assert better["Timestamp"] == "2026-10-18 10:00:00"
    assert perfect["Accuracy"] == "Perfect!"
    assert perfect["Difference"] == "0"
    assert worse["Difference"] == "-1"
    assert worse["Accuracy"] == "25% off"
    assert worse["Timestamp"] == "N/A"


def test_table_row_bad_timestamp():
    row = build_summary([countdown(5, 5, timestamp="yesterday")]).rows[0]

    assert table_row(row)["Timestamp"] == "N/A"


@pytest.mark.parametrize(
    "value,expected",
    [(3, 3.0), ("4.5", 4.5), (" 2 ", 2.0), ("", None), ("x", None), (None, None), (True, None), ("inf", None), ([1], None)],
)
def test_coerce_number(value, expected):
    assert coerce_number(value) == expected


def test_to_dict_is_json_safe():
    data = build_summary([countdown(5, 7)]).to_dict()

    assert data["ok"] is True
    assert data["distribution"][0]["min"] is None
    assert data["distribution"][-1]["max"] is None
    assert data["stats"]["underestimators_pct"] == 100
    assert data["count"] == 1


def test_load_summary_reads_newest_first(tmp_path):
    db_path = tmp_path / "attempts.db"
    ensure_db(db_path)
    insert_attempt(db_path, countdown(5, 5))
    insert_attempt(db_path, {"taskType": "month_sort_seconds", "predictedSeconds": 3, "actualSeconds": 4})
    insert_attempt(db_path, countdown(2, 9))

    summary = load_summary(db_path)

    assert [r.predicted for r in summary.rows] == [2.0, 5.0]
    assert summary.ignored_variants == 1
    assert summary.rows[0].timestamp != "2026-10-18T10:00:00.000Z"


def test_load_summary_missing_db(tmp_path):
    summary = load_summary(tmp_path / "missing.db")

    assert summary.rows == []
    assert summary.stats == DashboardStats()


def test_load_summary_read_failure_is_not_fatal(tmp_path, monkeypatch):
    def broken(_path):
        raise sqlite3.OperationalError("disk I/O error")

    monkeypatch.setattr("app.aggregate.read_attempts", broken)

    summary = load_summary(tmp_path / "attempts.db")

    assert summary.load_error == "read_failed"
    assert summary.stats == DashboardStats()
    assert summary.to_dict()["ok"] is False
