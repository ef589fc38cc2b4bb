import argparse
import logging
import sys

from aggregator import format_summary
from config_manager import CONFIG_FILE, ensure_parent_directory, load_config, resolve_log_level
from generator import write_demo_trace
from loader import load_and_analyze
from models import ExportError, LogReadError
from reports import export_events_csv, export_html_report, plot_outcome_distribution

logger = logging.getLogger(__name__)


# ---------------- CLI ----------------

def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Анализ журнала шагов развёртывания"
    )
    parser.add_argument("log_file", nargs="?", help="Путь к журналу развёртывания")
    parser.add_argument("--csv", dest="csv_path", help="Сохранить временную шкалу в CSV")
    parser.add_argument("--html", dest="html_path", help="Сохранить HTML-отчёт")
    parser.add_argument("--chart", dest="chart_path", help="Сохранить график исходов (PNG)")
    parser.add_argument("--config", default=CONFIG_FILE, help="Файл правил (JSON)")
    parser.add_argument(
        "--demo",
        metavar="PATH",
        help="Записать учебный журнал в PATH и проанализировать его",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)
    if not args.log_file and not args.demo:
        parser.error("нужно указать журнал или --demo")
    if args.log_file and args.demo:
        parser.error("журнал и --demo взаимоисключающие")
    return args


# ---------------- Main ----------------

def main(argv=None) -> int:
    args = parse_args(argv)
    cfg = load_config(args.config)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else resolve_log_level(cfg),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        stream=sys.stderr,
    )

    path = args.log_file
    if args.demo:
        try:
            ensure_parent_directory(args.demo)
            write_demo_trace(args.demo)
        except OSError as e:
            print(f"Не удалось записать учебный журнал: {e}", file=sys.stderr)
            return 1
        logger.info("Demo trace written to %s", args.demo)
        path = args.demo

    try:
        result = load_and_analyze(path, cfg)
    except LogReadError as e:
        print(str(e), file=sys.stderr)
        return 1

    print(format_summary(result))

    status = 0
    try:
        if args.csv_path:
            prepare_export(args.csv_path)
            export_events_csv(result, args.csv_path, cfg.csv_delimiter)
        if args.html_path:
            prepare_export(args.html_path)
            export_html_report(result, args.html_path, cfg.report_title)
        if args.chart_path:
            prepare_export(args.chart_path)
            plot_outcome_distribution(result, args.chart_path)
    except ExportError as e:
        print(str(e), file=sys.stderr)
        status = 2
    return status


def prepare_export(path: str) -> None:
    try:
        ensure_parent_directory(path)
    except OSError as e:
        raise ExportError(f"Не удалось создать каталог для {path}: {e}") from e


if __name__ == "__main__":
    sys.exit(main())
