import csv
import html
import logging
from typing import List, Optional, Tuple

import matplotlib.pyplot as plt

from aggregator import format_duration
from models import AnalysisResult, ExportError, LogEvent, StepKind

logger = logging.getLogger(__name__)

CSV_FIELDS = ("timestamp", "outcome", "message")

CSS_CLASSES = {
    StepKind.SUCCESS: "step-success",
    StepKind.ERROR: "step-error",
    StepKind.WARNING: "step-warning",
}

HTML_STYLE = """
body { font-family: Segoe UI, Arial, sans-serif; margin: 24px; color: #1f2933; }
table { border-collapse: collapse; margin-bottom: 24px; }
th, td { border: 1px solid #cbd2d9; padding: 4px 10px; text-align: left; }
th { background: #e4e7eb; }
tr.step-success td { background: #e3f9e5; }
tr.step-error td { background: #ffe3e3; }
tr.step-warning td { background: #fff3c4; }
"""


def format_timestamp(ev: LogEvent) -> str:
    return ev.timestamp.isoformat(sep=" ", timespec="milliseconds")


def build_csv_rows(result: AnalysisResult) -> List[Tuple[str, str, str]]:
    # Строки (время, исход, сообщение) в порядке временной шкалы, все три вида событий.
    return [(format_timestamp(ev), ev.kind.value, ev.message) for ev in result.events]


def export_events_csv(result: AnalysisResult, path: str, delimiter: str = ";") -> None:
    # Экспорт временной шкалы в CSV.
    try:
        with open(path, "w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f, delimiter=delimiter)
            writer.writerow(CSV_FIELDS)
            writer.writerows(build_csv_rows(result))
    except (OSError, csv.Error) as e:
        raise ExportError(f"Не удалось сохранить CSV {path}: {e}") from e
    logger.info("CSV exported to %s (%d rows)", path, len(result.events))


def render_html_report(result: AnalysisResult, title: str = "Отчёт по журналу развёртывания") -> str:
    esc = html.escape
    summary = [
        ("Шагов всего", str(result.total_steps)),
        ("Успешно", str(result.success_count)),
        ("Ошибок", str(result.failure_count)),
        ("Предупреждений", str(result.warning_count)),
        ("Доля успешных", f"{result.success_rate:.1f}%"),
        ("Общая длительность", format_duration(result.total_duration)),
        ("Среднее время шага", format_duration(result.average_step_duration)),
        ("Коды ошибок", ", ".join(sorted(result.error_codes)) or "—"),
    ]

    parts = [
        "<!DOCTYPE html>",
        "<html>",
        "<head>",
        '<meta charset="utf-8">',
        f"<title>{esc(title)}</title>",
        f"<style>{HTML_STYLE}</style>",
        "</head>",
        "<body>",
        f"<h1>{esc(title)}</h1>",
        "<h2>Сводка</h2>",
        '<table class="summary">',
    ]
    for label, value in summary:
        parts.append(f"<tr><th>{esc(label)}</th><td>{esc(value)}</td></tr>")
    parts.append("</table>")

    parts.append("<h2>Временная шкала</h2>")
    parts.append('<table class="timeline">')
    parts.append("<tr><th>Время</th><th>Исход</th><th>Сообщение</th><th>Код</th></tr>")
    for ev in result.events:
        parts.append(
            f'<tr class="{CSS_CLASSES[ev.kind]}">'
            f"<td>{esc(format_timestamp(ev))}</td>"
            f"<td>{esc(ev.kind.value)}</td>"
            f"<td>{esc(ev.message)}</td>"
            f"<td>{esc(ev.error_code or '')}</td>"
            "</tr>"
        )
    parts.append("</table>")
    parts.append("</body>")
    parts.append("</html>")
    return "\n".join(parts)


def export_html_report(result: AnalysisResult, path: str, title: str = "Отчёт по журналу развёртывания") -> None:
    document = render_html_report(result, title)
    try:
        with open(path, "w", encoding="utf-8") as f:
            f.write(document)
    except OSError as e:
        raise ExportError(f"Не удалось сохранить HTML-отчёт {path}: {e}") from e
    logger.info("HTML report exported to %s", path)


def plot_outcome_distribution(result: AnalysisResult, path: Optional[str] = None) -> None:
    # График распределения шагов по исходам. С path сохраняется в файл, иначе показывается.
    labels = [kind.value for kind in StepKind]
    values = [result.success_count, result.failure_count, result.warning_count]
    colors = ["#3ebd93", "#e12d39", "#f0b429"]
    fig = plt.figure()
    plt.bar(labels, values, color=colors)
    plt.xlabel("Исход шага")
    plt.ylabel("Количество событий")
    plt.title("Распределение шагов по исходам")
    plt.tight_layout()
    if path is None:
        plt.show()
        return
    try:
        fig.savefig(path)
    except OSError as e:
        raise ExportError(f"Не удалось сохранить график {path}: {e}") from e
    finally:
        plt.close(fig)
    logger.info("Chart saved to %s", path)
