import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, TextIO

ROOT_LOGGER_NAME = "openrouter_client"

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime", "taskName"}


class FlushingFileHandler(logging.FileHandler):
    """FileHandler that flushes after every emit for real-time log visibility."""
    def emit(self, record):
        super().emit(record)
        self.flush()


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now().astimezone().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS or key.startswith('_'):
                continue
            log_data[key] = value

        if record.exc_info:
            log_data['exc_info'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class ClientLogger:
    """Logger that takes structured fields as keyword arguments.

    ``logger.debug("Request sent", method="POST", attempt=2)`` attaches
    ``method`` and ``attempt`` to the record; JSONFormatter writes them out as
    top-level keys. Fields bound with :meth:`bind` are added to every record.
    """
    def __init__(self, name: str = ROOT_LOGGER_NAME, /, **context):
        self.name = name
        self.context = context
        self._logger = logging.getLogger(name)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def bind(self, **fields) -> 'ClientLogger':
        return ClientLogger(self.name, **{**self.context, **fields})

    def is_enabled_for(self, level: str) -> bool:
        return self._logger.isEnabledFor(getattr(logging, level.upper()))

    def _log(self, level: str, message: str, /, **kwargs):
        reserved_params = {}
        for param in ['exc_info', 'stack_info', 'stacklevel']:
            if param in kwargs:
                reserved_params[param] = kwargs.pop(param)

        extra = {}
        for key, value in {**self.context, **kwargs}.items():
            # LogRecord refuses extras that shadow its own attributes
            if key in _RECORD_ATTRS:
                key = f"field_{key}"
            extra[key] = value

        self._logger.log(
            getattr(logging, level.upper()),
            message,
            extra=extra,
            **reserved_params
        )

    def debug(self, message: str, /, **kwargs):
        self._log('DEBUG', message, **kwargs)

    def info(self, message: str, /, **kwargs):
        self._log('INFO', message, **kwargs)

    def warning(self, message: str, /, **kwargs):
        self._log('WARNING', message, **kwargs)

    def error(self, message: str, /, **kwargs):
        self._log('ERROR', message, **kwargs)


def get_logger(name: str = ROOT_LOGGER_NAME, /, **context) -> ClientLogger:
    return ClientLogger(name, **context)


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    stream: Optional[TextIO] = None,
    log_file: Optional[Path] = None
) -> logging.Logger:
    """Attach console (and optionally JSONL file) handlers to the library logger.

    The library installs no handlers on import; applications and the CLI call
    this once. Calling it again replaces the handlers it installed before.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(getattr(logging, level.upper()))

    for handler in root.handlers[:]:
        if getattr(handler, '_openrouter_client', False):
            handler.close()
            root.removeHandler(handler)

    console_handler = logging.StreamHandler(stream or sys.stderr)
    if json_output:
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    console_handler._openrouter_client = True
    root.addHandler(console_handler)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = FlushingFileHandler(log_path, mode='a')
        file_handler.setFormatter(JSONFormatter())
        file_handler._openrouter_client = True
        root.addHandler(file_handler)

    return root
