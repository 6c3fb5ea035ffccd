import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence, Tuple, Union

from workshop.runtime.models import AttemptRecord, Score
from workshop.scoring import compute_score, elapsed_seconds
from workshop.tasks.base import TaskVariant
from workshop.tasks.month_sort import FIELD_COUNT, FIELD_LABEL, MonthSortTask

logger = logging.getLogger(__name__)

# Фазы храним строками, как и раньше: setup -> prediction -> action -> results
PHASE_SETUP = "setup"
PHASE_PREDICTION = "prediction"
PHASE_ACTION = "action"
PHASE_RESULTS = "results"

ANONYMOUS_USER = "anonymous"

MSG_ESTIMATE_REQUIRED = "Estimate required"
MSG_ESTIMATE_NOT_NUMBER = "Estimate must be a number"
MSG_ESTIMATE_NOT_POSITIVE = "Estimate must be positive"

MAX_ESTIMATE_LEN = 8


@dataclass
class SetupState:
    variant_index: int = 0
    phase: str = field(default=PHASE_SETUP, init=False)


@dataclass
class PredictionState:
    variant: TaskVariant
    text: str = ""
    error: str = ""
    phase: str = field(default=PHASE_PREDICTION, init=False)


@dataclass
class ActionState:
    variant: TaskVariant
    estimate: float
    task: MonthSortTask
    elapsed_tenths: int = 0
    running: bool = False
    confirming_stop: bool = False
    focus_row: int = 0
    focus_field: str = FIELD_LABEL
    phase: str = field(default=PHASE_ACTION, init=False)

    @property
    def elapsed(self) -> float:
        return elapsed_seconds(self.elapsed_tenths)

    @property
    def remaining(self) -> Optional[float]:
        limit = self.variant.time_limit_tenths
        if limit is None:
            return None
        return elapsed_seconds(limit - self.elapsed_tenths)


@dataclass
class ResultsState:
    variant: TaskVariant
    record: AttemptRecord
    elapsed: float
    phase: str = field(default=PHASE_RESULTS, init=False)

    @property
    def score(self) -> Score:
        return self.record.score


WorkshopState = Union[SetupState, PredictionState, ActionState, ResultsState]


class WorkshopStateMachine:
    """
    Сценарий одного участника: выбор задачи, прогноз, задача на время, результат.

    Таймер (ticker) принадлежит фазе action: запускается по Start,
    останавливается при завершении попытки, reset или выходе.
    Запись попытки отдаётся в attempt_sink и не ждётся (fire-and-forget).
    """

    def __init__(
        self,
        variants: Sequence[TaskVariant],
        ticker,
        attempt_sink: Callable[[AttemptRecord], None],
        user_id: Optional[str] = None,
    ) -> None:
        if not variants:
            raise ValueError("at least one task variant is required")
        self.variants = list(variants)
        self.ticker = ticker
        self.attempt_sink = attempt_sink
        self.user_id = user_id or ANONYMOUS_USER
        self.state: WorkshopState = SetupState()

    @property
    def phase(self) -> str:
        return self.state.phase

    @property
    def has_variant_choice(self) -> bool:
        return len(self.variants) > 1

    # --------------------------
    # setup
    # --------------------------
    def select_variant(self, index: int) -> bool:
        if not isinstance(self.state, SetupState):
            return False
        if not 0 <= index < len(self.variants):
            return False
        self.state.variant_index = index
        return True

    def confirm_setup(self) -> bool:
        if not isinstance(self.state, SetupState):
            return False
        self.state = PredictionState(variant=self.variants[self.state.variant_index])
        return True

    # --------------------------
    # prediction
    # --------------------------
    def type_estimate(self, char: str) -> bool:
        if not isinstance(self.state, PredictionState):
            return False
        if len(self.state.text) >= MAX_ESTIMATE_LEN or not char.isprintable():
            return False
        self.state.text += char
        self.state.error = ""
        return True

    def erase_estimate(self) -> bool:
        if not isinstance(self.state, PredictionState):
            return False
        self.state.text = self.state.text[:-1]
        self.state.error = ""
        return True

    def submit_estimate(self) -> Tuple[bool, str]:
        if not isinstance(self.state, PredictionState):
            return False, ""
        ok, message, value = parse_estimate(self.state.text)
        if not ok:
            self.state.error = message
            return False, message
        variant = self.state.variant
        self.state = ActionState(variant=variant, estimate=value, task=variant.build_task())
        return True, ""

    def back(self) -> bool:
        if not isinstance(self.state, PredictionState):
            return False
        index = self.variants.index(self.state.variant)
        self.state = SetupState(variant_index=index)
        return True

    # --------------------------
    # action
    # --------------------------
    def start_timer(self) -> bool:
        if not isinstance(self.state, ActionState) or self.state.running:
            return False
        self.ticker.start()
        self.state.running = True
        return True

    def tick(self) -> bool:
        state = self.state
        # тики после остановки таймера просто игнорируем
        if not isinstance(state, ActionState) or not state.running:
            return False
        state.elapsed_tenths += 1
        limit = state.variant.time_limit_tenths
        if limit is not None and state.elapsed_tenths >= limit:
            self._finalize()
        return True

    def focus(self, row: int, field_name: str) -> bool:
        state = self.state
        if not isinstance(state, ActionState) or not state.task.is_enterable(row):
            return False
        if field_name not in (FIELD_LABEL, FIELD_COUNT):
            return False
        state.focus_row = row
        state.focus_field = field_name
        return True

    def focus_next(self) -> bool:
        state = self.state
        if not isinstance(state, ActionState):
            return False
        if state.focus_field == FIELD_LABEL:
            return self.focus(state.focus_row, FIELD_COUNT)
        return self.focus(state.focus_row + 1, FIELD_LABEL)

    def focus_previous(self) -> bool:
        state = self.state
        if not isinstance(state, ActionState):
            return False
        if state.focus_field == FIELD_COUNT:
            return self.focus(state.focus_row, FIELD_LABEL)
        return self.focus(state.focus_row - 1, FIELD_COUNT)

    def type_char(self, char: str) -> bool:
        state = self._editable_action()
        if state is None:
            return False
        row_before = state.task.unlocked_index
        changed = state.task.type_char(state.focus_row, state.focus_field, char)
        if changed and state.focus_field == FIELD_COUNT and state.task.unlocked_index > row_before:
            self.focus(state.task.unlocked_index, FIELD_LABEL)
        return changed

    def erase_char(self) -> bool:
        state = self._editable_action()
        if state is None:
            return False
        return state.task.erase_char(state.focus_row, state.focus_field)

    def request_stop(self) -> bool:
        state = self.state
        if not isinstance(state, ActionState) or not state.running:
            return False
        state.confirming_stop = True
        return True

    def cancel_stop(self) -> bool:
        state = self.state
        if not isinstance(state, ActionState) or not state.confirming_stop:
            return False
        state.confirming_stop = False
        return True

    def confirm_stop(self) -> bool:
        state = self.state
        if not isinstance(state, ActionState) or not state.confirming_stop:
            return False
        self._finalize()
        return True

    # --------------------------
    # results
    # --------------------------
    def reset(self) -> bool:
        if not isinstance(self.state, ResultsState):
            return False
        self.ticker.stop()
        self.state = SetupState()
        return True

    def shutdown(self) -> None:
        self.ticker.stop()

    def _editable_action(self) -> Optional[ActionState]:
        state = self.state
        if not isinstance(state, ActionState):
            return None
        if not state.running or state.confirming_stop:
            return None
        return state

    def _finalize(self) -> None:
        state = self.state
        self.ticker.stop()
        state.running = False
        elapsed = state.elapsed
        variant = state.variant
        score = compute_score(state.estimate, variant.measure(elapsed, state.task))
        record = AttemptRecord(
            user_id=self.user_id,
            task_type=variant.task_type,
            predicted_key=variant.predicted_key,
            actual_key=variant.actual_key,
            score=score,
            answers=state.task.answers(),
            extra=variant.extra_fields(elapsed, state.task),
        )
        self.state = ResultsState(variant=variant, record=record, elapsed=elapsed)
        # результат показываем всегда, даже если запись не ушла
        try:
            self.attempt_sink(record)
        except Exception:
            logger.exception("Attempt hand-off failed for task_type=%s", variant.task_type)


def parse_estimate(text: str) -> Tuple[bool, str, float]:
    text = (text or "").strip()
    if not text:
        return False, MSG_ESTIMATE_REQUIRED, 0.0
    try:
        value = float(text)
    except ValueError:
        return False, MSG_ESTIMATE_NOT_NUMBER, 0.0
    if not math.isfinite(value):
        return False, MSG_ESTIMATE_NOT_NUMBER, 0.0
    if value <= 0:
        return False, MSG_ESTIMATE_NOT_POSITIVE, 0.0
    return True, "", value
