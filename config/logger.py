import json
import logging
import sys
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from logging.handlers import RotatingFileHandler
from pathlib import Path

CONSOLE_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s'

# Passed through ``extra=`` by the refresh cycle and the notification path
CONTEXT_FIELDS = ('currency', 'source', 'stage', 'chat_id')

NOISY_LOGGERS = ('httpx', 'httpcore', 'aiosqlite')


class LogJSONEncoder(json.JSONEncoder):
    def default(self, o):
        if isinstance(o, (datetime, date)):
            return o.isoformat()
        if isinstance(o, Decimal):
            return str(o)
        if isinstance(o, Enum):
            return o.value
        if is_dataclass(o) and not isinstance(o, type):
            return asdict(o)
        return super().default(o)


class JSONLogFormatter(logging.Formatter):
    """
    One JSON object per line, for the log file.

    Context attributes such as ``currency`` or ``source`` are grouped under
    ``context`` so failures can be filtered per bank or per currency.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'ts': datetime.fromtimestamp(record.created).isoformat(timespec='milliseconds'),
            'level': record.levelname,
            'logger': record.name,
            'msg': record.getMessage(),
            'where': f'{record.module}.{record.funcName}:{record.lineno}',
        }

        context = {key: getattr(record, key) for key in CONTEXT_FIELDS if hasattr(record, key)}
        if context:
            entry['context'] = context

        if record.exc_info and record.exc_info[0] is not None:
            entry['error'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': self.formatException(record.exc_info),
            }

        return json.dumps(entry, ensure_ascii=False, cls=LogJSONEncoder)


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt='%H:%M:%S'))
    return handler


def _json_file_handler(log_directory: str, max_file_size: int, backup_count: int) -> logging.Handler:
    directory = Path(log_directory)
    directory.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        directory / 'app.log', maxBytes=max_file_size, backupCount=backup_count, encoding='utf-8'
    )
    handler.setFormatter(JSONLogFormatter())
    return handler


def setup_logging(
    level: str = 'INFO',
    log_directory: str | None = None,
    max_file_size: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """Console logging always; a rotating JSON file as well when ``log_directory`` is set."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root_logger.addHandler(_console_handler())
    if log_directory:
        root_logger.addHandler(_json_file_handler(log_directory, max_file_size, backup_count))
