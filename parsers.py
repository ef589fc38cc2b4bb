import logging
import re
from datetime import datetime
from typing import List, Optional

from models import LogEvent, StepKind

logger = logging.getLogger(__name__)

TRACE_TIME_FORMAT = "%m-%d-%Y %H:%M:%S.%f"

# Маркер шага и поля строки трассировки:
# <![STEP[Error]STEP]!> date="01-02-2024" time="03:04:05.006" message="..." code="80004005"
# Сообщение может содержать кавычки; поле code (если есть) завершает строку.
step_pattern = re.compile(
    r'<!\[STEP\[(?P<kind>Success|Error|Warning)\]STEP\]!>\s*'
    r'date="(?P<date>[^"]*)"\s+'
    r'time="(?P<time>[^"]*)"\s+'
    r'message="(?P<message>.*?)"'
    r'(?:\s+code="(?P<code>[^"]*)")?\s*$'
)

date_pattern = re.compile(r"[0-9]{2}-[0-9]{2}-[0-9]{4}")
time_pattern = re.compile(r"[0-9]{2}:[0-9]{2}:[0-9]{2}\.[0-9]{3}")
code_pattern = re.compile(r"[+-]?[0-9]+|0[xX][0-9A-Fa-f]+")

KINDS_BY_LABEL = {kind.value: kind for kind in StepKind}


def parse_trace_time(date_str: str, time_str: str) -> Optional[datetime]:
    # Дата и время склеиваются через пробел и разбираются строго по шаблону.
    if not date_pattern.fullmatch(date_str) or not time_pattern.fullmatch(time_str):
        return None
    try:
        return datetime.strptime(f"{date_str} {time_str}", TRACE_TIME_FORMAT)
    except ValueError:
        return None


def parse_error_code(raw: Optional[str]) -> Optional[str]:
    # Код записывается как есть: десятичное число со знаком или 0x с шестнадцатеричными цифрами.
    if raw is None:
        return None
    code = raw.strip()
    if not code_pattern.fullmatch(code):
        return None
    return code


def parse_step_line(line: str) -> Optional[LogEvent]:
    m = step_pattern.search(line)
    if not m:
        return None

    data = m.groupdict()
    ts = parse_trace_time(data["date"], data["time"])
    if ts is None:
        return None

    kind = KINDS_BY_LABEL[data["kind"]]
    error_code = None
    if kind is StepKind.ERROR:
        error_code = parse_error_code(data.get("code"))

    return LogEvent(
        kind=kind,
        timestamp=ts,
        message=data["message"],
        error_code=error_code,
    )


def extract(text: str) -> List[LogEvent]:
    # Извлечение событий из полного текста журнала. Нераспознанные строки пропускаются.
    events: List[LogEvent] = []
    skipped = 0
    for line in text.splitlines():
        if not line.strip():
            continue
        ev = parse_step_line(line)
        if ev is None:
            skipped += 1
            logger.debug("Skipped unrecognized line: %r", line[:120])
            continue
        events.append(ev)

    logger.debug("Extracted %d events, skipped %d lines", len(events), skipped)
    return events
