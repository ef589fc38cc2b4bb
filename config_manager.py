import json
import logging
import os
from dataclasses import dataclass, field, asdict
from typing import List

logger = logging.getLogger(__name__)

CONFIG_FILE = "trace_rules.json"

# кодировки пробуются по порядку: UTF-8, затем ANSI; latin-1 декодирует любые байты
DEFAULT_ENCODINGS = ("utf-8-sig", "cp1252", "latin-1")


@dataclass
class Config:
    # Параметры чтения журналов и экспорта отчётов.
    encodings: List[str] = field(default_factory=lambda: list(DEFAULT_ENCODINGS))
    csv_delimiter: str = ";"
    report_title: str = "Отчёт по журналу развёртывания"
    reports_dir: str = "reports"
    logs_dir: str = "logs"
    log_level: str = "INFO"


def _is_text(value) -> bool:
    return isinstance(value, str)


def _is_delimiter(value) -> bool:
    # csv принимает только один символ, не кавычку и не перевод строки
    return isinstance(value, str) and len(value) == 1 and value not in '"\r\n'


def _is_encoding_list(value) -> bool:
    return isinstance(value, list) and bool(value) and all(isinstance(e, str) and e for e in value)


def load_config(path: str = CONFIG_FILE) -> Config:
    # Загрузить конфиг из JSON, либо вернуть конфиг по умолчанию.
    if not os.path.exists(path):
        return Config()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Config %s is unreadable, using defaults: %s", path, e)
        return Config()

    if not isinstance(data, dict):
        logger.warning("Config %s is not a JSON object, using defaults", path)
        return Config()

    def get(key, default, valid):
        value = data.get(key, default)
        if valid(value):
            return value
        logger.warning("Config %s: invalid %s=%r, using default %r", path, key, value, default)
        return default

    cfg = Config()
    cfg.encodings = list(get("encodings", cfg.encodings, _is_encoding_list))
    cfg.csv_delimiter = get("csv_delimiter", cfg.csv_delimiter, _is_delimiter)
    cfg.report_title = get("report_title", cfg.report_title, _is_text)
    cfg.reports_dir = get("reports_dir", cfg.reports_dir, _is_text)
    cfg.logs_dir = get("logs_dir", cfg.logs_dir, _is_text)
    cfg.log_level = get("log_level", cfg.log_level, _is_text).upper()
    return cfg


def save_config(config: Config, path: str = CONFIG_FILE) -> None:
    # Сохранить конфиг в JSON.
    data = asdict(config)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)


def ensure_directories(config: Config) -> None:
    # Рабочие каталоги для журналов и отчётов.
    for directory in (config.logs_dir, config.reports_dir):
        if directory:
            os.makedirs(directory, exist_ok=True)


def resolve_log_level(config: Config) -> int:
    level = getattr(logging, config.log_level, None)
    return level if isinstance(level, int) else logging.INFO


def ensure_parent_directory(path: str) -> None:
    # Каталог для файла экспорта; текущий каталог не создаётся.
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
