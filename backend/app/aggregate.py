import logging
import math
import sqlite3
from bisect import bisect_right
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from app.db import read_attempts

logger = logging.getLogger(__name__)

SUPPORTED_TASK_TYPE = "countdown_months"

# (label, min, max): полуинтервалы [min, max), покрывают всю числовую ось
ERROR_BUCKETS = (
    ("-6 or less", -math.inf, -5),
    ("-5 to -4", -5, -3),
    ("-3 to -2", -3, -1),
    ("-1", -1, 0),
    ("Perfect (0)", 0, 1),
    ("+1", 1, 2),
    ("+2 to +3", 2, 4),
    ("+4 to +5", 4, 6),
    ("+6 or more", 6, math.inf),
)
BUCKET_EDGES = [bucket[1] for bucket in ERROR_BUCKETS[1:]]

COLOR_PERFECT = "#f59e0b"
COLOR_BETTER = "#10b981"
COLOR_WORSE = "#ef4444"


@dataclass(frozen=True)
class AttemptRow:
    id: Any
    user_id: str
    predicted: float
    actual: float
    error: float
    error_percentage: float
    timestamp: Optional[str]


@dataclass
class DashboardStats:
    total_participants: int = 0
    avg_error: float = 0.0
    avg_predicted: float = 0.0
    avg_actual: float = 0.0
    underestimators: int = 0
    overestimators: int = 0
    perfect_predictions: int = 0

    def share(self, count: int) -> int:
        if self.total_participants <= 0:
            return 0
        return int(round(count / self.total_participants * 100.0))


@dataclass
class DashboardSummary:
    rows: list[AttemptRow] = field(default_factory=list)
    stats: DashboardStats = field(default_factory=DashboardStats)
    ignored_variants: int = 0
    invalid_records: int = 0
    load_error: str = ""

    def distribution(self) -> list[dict[str, Any]]:
        return error_distribution(self.rows)

    def pairs(self) -> list[dict[str, float]]:
        return scatter_pairs(self.rows)

    def table(self) -> list[dict[str, str]]:
        return [table_row(row) for row in self.rows]

    def to_dict(self) -> dict[str, Any]:
        stats = asdict(self.stats)
        stats["underestimators_pct"] = self.stats.share(self.stats.underestimators)
        stats["overestimators_pct"] = self.stats.share(self.stats.overestimators)
        stats["perfect_predictions_pct"] = self.stats.share(self.stats.perfect_predictions)
        return {
            "ok": not self.load_error,
            "stats": stats,
            "distribution": [_json_safe_bucket(b) for b in self.distribution()],
            "pairs": self.pairs(),
            "rows": self.table(),
            "count": len(self.rows),
            "ignored_variants": self.ignored_variants,
            "invalid_records": self.invalid_records,
        }


def _json_safe_bucket(bucket: dict[str, Any]) -> dict[str, Any]:
    out = dict(bucket)
    for key in ("min", "max"):
        if math.isinf(out[key]):
            out[key] = None
    return out


def coerce_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def normalize_countdown(doc: dict[str, Any]) -> Optional[AttemptRow]:
    predicted = coerce_number(doc.get("predictedMonths"))
    actual = coerce_number(doc.get("actualMonths"))
    if predicted is None or actual is None:
        return None
    error = actual - predicted
    return AttemptRow(
        id=doc.get("id"),
        user_id=str(doc.get("userId") or "anonymous"),
        predicted=predicted,
        actual=actual,
        error=error,
        error_percentage=(error / predicted * 100.0) if predicted > 0 else 0.0,
        timestamp=doc.get("timestamp"),
    )


def build_summary(documents: list[dict[str, Any]]) -> DashboardSummary:
    summary = DashboardSummary()
    for doc in documents:
        task_type = doc.get("taskType")
        if task_type == SUPPORTED_TASK_TYPE:
            row = normalize_countdown(doc)
            if row is None:
                summary.invalid_records += 1
                continue
            summary.rows.append(row)
        else:
            # старые и чужие форматы не показываем: это политика схемы, не ошибка
            summary.ignored_variants += 1
    summary.stats = compute_stats(summary.rows)
    return summary


def load_summary(db_path: Path) -> DashboardSummary:
    try:
        documents = read_attempts(db_path)
    except sqlite3.Error as exc:
        logger.error("Failed to read attempts from %s: %s", db_path, exc)
        return DashboardSummary(load_error="read_failed")
    return build_summary(documents)


def compute_stats(rows: list[AttemptRow]) -> DashboardStats:
    valid = [
        r for r in rows
        if math.isfinite(r.error) and math.isfinite(r.predicted) and math.isfinite(r.actual)
    ]
    if not valid:
        return DashboardStats()
    n = len(valid)
    return DashboardStats(
        total_participants=n,
        avg_error=sum(abs(r.error) for r in valid) / n,
        avg_predicted=sum(r.predicted for r in valid) / n,
        avg_actual=sum(r.actual for r in valid) / n,
        underestimators=sum(1 for r in valid if r.error > 0),
        overestimators=sum(1 for r in valid if r.error < 0),
        perfect_predictions=sum(1 for r in valid if r.error == 0),
    )


def bucket_index(error: float) -> int:
    if math.isnan(error):
        raise ValueError("error must be a number")
    return bisect_right(BUCKET_EDGES, error)


def bucket_color(label: str) -> str:
    if "Perfect" in label:
        return COLOR_PERFECT
    if "+" in label:
        return COLOR_BETTER
    return COLOR_WORSE


def error_distribution(rows: list[AttemptRow]) -> list[dict[str, Any]]:
    counts = [0] * len(ERROR_BUCKETS)
    for row in rows:
        counts[bucket_index(row.error)] += 1
    return [
        {
            "range": label,
            "min": low,
            "max": high,
            "count": counts[idx],
            "color": bucket_color(label),
        }
        for idx, (label, low, high) in enumerate(ERROR_BUCKETS)
    ]


def scatter_pairs(rows: list[AttemptRow]) -> list[dict[str, float]]:
    return [{"predicted": r.predicted, "actual": r.actual, "error": r.error} for r in rows]


def format_number(value: float) -> str:
    return f"{value:g}"


def format_timestamp(value: Optional[str]) -> str:
    if not value:
        return "N/A"
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return "N/A"
    return parsed.strftime("%Y-%m-%d %H:%M:%S")


def table_row(row: AttemptRow) -> dict[str, str]:
    if row.error == 0:
        accuracy = "Perfect!"
    else:
        accuracy = f"{abs(row.error_percentage):.0f}% off"
    sign = "+" if row.error > 0 else ""
    return {
        "Predicted": f"{format_number(row.predicted)} months",
        "Actual": f"{format_number(row.actual)} months",
        "Difference": f"{sign}{format_number(row.error)}",
        "Accuracy": accuracy,
        "Timestamp": format_timestamp(row.timestamp),
    }
