"""
Logging setup for the Roadmap API.

Everything logs through ``logging.getLogger(__name__)``; this module
only wires the root logger.  Records go to the console and, when
``LOG_FILE`` is set, to that file as well.  The HTTP client used for
owner lookups logs every request at INFO, so its loggers are held at
WARNING unless the service itself runs at DEBUG.
"""

import logging
from pathlib import Path
from typing import List, Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are too chatty at INFO
NOISY_LOGGERS = ("httpx", "httpcore")

CONSOLE_HANDLER = "roadmap_api.console"
FILE_HANDLER = "roadmap_api.file"


def build_handlers(logfile: Optional[str] = None) -> List[logging.Handler]:
    """Console handler plus a UTF-8 file handler when ``logfile`` is given.

    The parent directory of ``logfile`` is created if missing.
    """
    console = logging.StreamHandler()
    console.set_name(CONSOLE_HANDLER)
    handlers: List[logging.Handler] = [console]
    if logfile:
        log_path = Path(logfile).expanduser().resolve()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.set_name(FILE_HANDLER)
        handlers.append(file_handler)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Configure the root logger once.

    Later calls are no-ops while this module's handlers are attached.

    Parameters
    ----------
    level : str
        Level name (``"DEBUG"``, ``"INFO"``...), case insensitive.
        Unknown names fall back to ``INFO``.
    logfile : Optional[str]
        Extra destination for log records, usually ``settings.log_file``.
    """
    root = logging.getLogger()
    # Handlers added by other tools (pytest, uvicorn) are left alone
    if any(h.get_name() in (CONSOLE_HANDLER, FILE_HANDLER) for h in root.handlers):
        return

    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    root.setLevel(numeric_level)
    for handler in build_handlers(logfile):
        root.addHandler(handler)

    if numeric_level > logging.DEBUG:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
