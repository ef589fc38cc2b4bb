import logging
from typing import Optional, Sequence

from aggregator import analyze_text
from config_manager import DEFAULT_ENCODINGS, Config
from models import AnalysisResult, LogReadError

logger = logging.getLogger(__name__)


def read_trace_file(path: str, encodings: Optional[Sequence[str]] = None) -> str:
    # Прочитать журнал целиком. Частичное содержимое не возвращается.
    encodings = list(encodings or DEFAULT_ENCODINGS)
    try:
        with open(path, "rb") as f:
            raw = f.read()
    except OSError as e:
        raise LogReadError(f"Не удалось прочитать файл {path}: {e}") from e

    for enc in encodings:
        try:
            text = raw.decode(enc)
        except (UnicodeDecodeError, LookupError):
            continue
        logger.debug("Read %s (%d bytes) as %s", path, len(raw), enc)
        return text

    raise LogReadError(
        f"Не удалось декодировать файл {path} ни в одной из кодировок: {', '.join(encodings)}"
    )


def load_and_analyze(path: str, cfg: Optional[Config] = None) -> AnalysisResult:
    cfg = cfg or Config()
    text = read_trace_file(path, cfg.encodings)
    result = analyze_text(text)
    logger.info(
        "Analyzed %s: %d events, success rate %.1f%%",
        path, len(result.events), result.success_rate,
    )
    return result
