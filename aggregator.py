import logging
from collections import Counter
from datetime import timedelta
from typing import Iterable, List

from models import AnalysisResult, LogEvent, StepKind
from parsers import extract

logger = logging.getLogger(__name__)


def aggregate(events: Iterable[LogEvent]) -> AnalysisResult:
    # Сводка по последовательности событий. Порядок входа не обязан быть хронологическим.
    timeline = sorted(events, key=lambda e: e.timestamp)

    counter = Counter()
    codes = set()
    for ev in timeline:
        counter[ev.kind] += 1
        if ev.error_code is not None:
            codes.add(ev.error_code)

    success = counter[StepKind.SUCCESS]
    failure = counter[StepKind.ERROR]
    warning = counter[StepKind.WARNING]

    start_time = timeline[0].timestamp if timeline else None
    end_time = timeline[-1].timestamp if timeline else None
    total_duration = end_time - start_time if timeline else timedelta(0)

    steps = success + failure
    if steps:
        success_rate = success / steps * 100
        average_step = total_duration / steps
    else:
        success_rate = 0.0
        average_step = timedelta(0)

    logger.debug(
        "Aggregated %d events: success=%d error=%d warning=%d",
        len(timeline), success, failure, warning,
    )
    return AnalysisResult(
        events=tuple(timeline),
        success_count=success,
        failure_count=failure,
        warning_count=warning,
        error_codes=frozenset(codes),
        start_time=start_time,
        end_time=end_time,
        total_duration=total_duration,
        success_rate=success_rate,
        average_step_duration=average_step,
    )


def analyze_text(text: str) -> AnalysisResult:
    return aggregate(extract(text))


def format_duration(td: timedelta) -> str:
    # ЧЧ:ММ:СС.мс
    total_ms = td // timedelta(milliseconds=1)
    hours, rest = divmod(total_ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    seconds, ms = divmod(rest, 1000)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}.{ms:03d}"


def format_summary(result: AnalysisResult) -> str:
    lines: List[str] = []
    lines.append(f"Шагов всего: {result.total_steps}")
    lines.append(f"Успешно: {result.success_count}")
    lines.append(f"Ошибок: {result.failure_count}")
    lines.append(f"Предупреждений: {result.warning_count}")
    lines.append(f"Доля успешных: {result.success_rate:.1f}%")
    if result.start_time and result.end_time:
        lines.append(
            f"Период: {result.start_time.isoformat(sep=' ', timespec='milliseconds')} — "
            f"{result.end_time.isoformat(sep=' ', timespec='milliseconds')}"
        )
    lines.append(f"Общая длительность: {format_duration(result.total_duration)}")
    lines.append(f"Среднее время шага: {format_duration(result.average_step_duration)}")
    if result.error_codes:
        lines.append(f"Коды ошибок: {', '.join(sorted(result.error_codes))}")
    else:
        lines.append("Коды ошибок: —")
    return "\n".join(lines)
