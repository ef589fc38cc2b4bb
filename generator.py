from datetime import datetime, timedelta
from typing import List, Optional


def format_step_line(kind: str, ts: datetime, message: str, code: Optional[str] = None) -> str:
    # Перевод строки внутри сообщения разорвал бы запись, заменяем пробелом.
    message = " ".join(message.splitlines())
    line = '<![STEP[{kind}]STEP]!> date="{date}" time="{time}" message="{message}"'.format(
        kind=kind,
        date=ts.strftime("%m-%d-%Y"),
        time=ts.strftime("%H:%M:%S.") + f"{ts.microsecond // 1000:03d}",
        message=message,
    )
    if code is not None:
        line += f' code="{code}"'
    return line


def generate_demo_trace() -> List[str]:
    # Учебный журнал развёртывания: параллельные подфазы, повтор кода ошибки, битые строки.
    base_time = datetime(2025, 11, 10, 13, 55, 0)

    lines = [
        "Deployment trace started",
        format_step_line("Success", base_time, "Validate task sequence"),
        format_step_line("Success", base_time + timedelta(seconds=12, milliseconds=250), "Partition disk"),
        # подфаза драйверов пишет раньше, чем завершилась подфаза образа
        format_step_line("Success", base_time + timedelta(minutes=4, seconds=3), "Apply OS image"),
        format_step_line("Warning", base_time + timedelta(minutes=2, seconds=40), "Driver package unsigned"),
        format_step_line("Success", base_time + timedelta(minutes=3, milliseconds=120), "Inject drivers"),
        format_step_line(
            "Error", base_time + timedelta(minutes=6, seconds=15), "Install application Office", "80004005"
        ),
        format_step_line(
            "Error", base_time + timedelta(minutes=6, seconds=48), "Retry application Office", "80004005"
        ),
        format_step_line("Success", base_time + timedelta(minutes=8, seconds=2), "Join domain"),
        format_step_line("Warning", base_time + timedelta(minutes=9), "Reboot pending"),
        # некорректная дата
        '<![STEP[Success]STEP]!> date="13-40-2025" time="14:05:00.000" message="Capture logs"',
        # строки, оборванные при завершении процесса
        '<![STEP[Error]STEP]!> date="11-10-2025" time="14:05:10.500" message="Copy logs" code="8000',
        '<![STEP[Error]STEP]!> date="11-10-2025" time="14:05:1',
    ]
    return lines


def write_demo_trace(path: str) -> List[str]:
    lines = generate_demo_trace()
    with open(path, "w", encoding="utf-8") as f:
        for ln in lines:
            f.write(ln + "\n")
    return lines
