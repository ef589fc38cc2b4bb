from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import FrozenSet, Optional, Tuple


class StepKind(Enum):
    # Исход шага развёртывания; значение совпадает с меткой в логе.
    SUCCESS = "Success"
    ERROR = "Error"
    WARNING = "Warning"


@dataclass(frozen=True)
class LogEvent:
    # Одно распознанное событие (шаг) журнала развёртывания.
    kind: StepKind
    timestamp: datetime
    message: str
    error_code: Optional[str] = None  # только для kind == ERROR


@dataclass(frozen=True)
class AnalysisResult:
    # Итог анализа одного журнала. Пересобирается целиком при каждом запуске.
    events: Tuple[LogEvent, ...]
    success_count: int
    failure_count: int
    warning_count: int
    error_codes: FrozenSet[str]
    start_time: Optional[datetime]
    end_time: Optional[datetime]
    total_duration: timedelta
    success_rate: float
    average_step_duration: timedelta

    @property
    def total_steps(self) -> int:
        return self.success_count + self.failure_count


class TraceAnalyzerError(Exception):
    pass


class LogReadError(TraceAnalyzerError):
    # Не удалось прочитать файл журнала целиком.
    pass


class ExportError(TraceAnalyzerError):
    # Не удалось записать отчёт; результат анализа остаётся корректным.
    pass
