from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class RowAnswer:
    month: str
    letter_count: Optional[int]


@dataclass(frozen=True)
class Score:
    predicted: float
    actual: float
    error: float
    error_percent: float
    error_ratio: float

    @property
    def error_percent_text(self) -> str:
        return f"{self.error_percent:.1f}"

    @property
    def error_ratio_text(self) -> str:
        return f"{self.error_ratio:.2f}"

    @property
    def is_perfect(self) -> bool:
        return self.error == 0


@dataclass(frozen=True)
class AttemptRecord:
    user_id: str
    task_type: str
    predicted_key: str
    actual_key: str
    score: Score
    answers: List[RowAnswer]
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "userId": self.user_id,
            "taskType": self.task_type,
            self.predicted_key: self.score.predicted,
            self.actual_key: self.score.actual,
            "answers": [
                {"month": a.month, "letterCount": a.letter_count} for a in self.answers
            ],
            "errorRatio": self.score.error_ratio_text,
        }
        payload.update(self.extra)
        return payload
