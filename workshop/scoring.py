from __future__ import annotations

from workshop.runtime.models import Score


def elapsed_seconds(tenths: int) -> float:
    return round(max(0, tenths) / 10.0, 1)


def compute_score(predicted: float, actual: float) -> Score:
    if predicted <= 0:
        raise ValueError(f"predicted must be positive, got {predicted}")
    if actual < 0:
        raise ValueError(f"actual must be non-negative, got {actual}")
    diff = actual - predicted
    return Score(
        predicted=predicted,
        actual=actual,
        error=diff,
        error_percent=diff / predicted * 100.0,
        error_ratio=actual / predicted,
    )


def verdict(score: Score) -> str:
    # положительная ошибка = сделал больше/дольше, чем предсказал
    if score.error > 0:
        return "Underestimated"
    if score.error < 0:
        return "Overestimated"
    return "Perfect"


def format_signed(value: float) -> str:
    if value > 0:
        return f"+{value:g}"
    return f"{value:g}"
