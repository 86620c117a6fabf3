from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

LOG_FILE_NAME = "procurement_ledger.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def _has_handler(logger: logging.Logger, handler_type: type, path: Path | None = None) -> bool:
    for h in logger.handlers:
        if type(h) is not handler_type:
            continue
        if path is None or getattr(h, "baseFilename", "") == str(path):
            return True
    return False


def setup_logging(settings) -> Path | None:
    """
    Configure le root logger une seule fois (appel idempotent).

    Console toujours ; fichier rotatif sous LOG_DIR/procurement_ledger.log si LOG_DIR est défini.
    Retourne le chemin du fichier de log, ou None.
    """
    level = logging.getLevelName(str(settings.LOG_LEVEL).upper())
    if not isinstance(level, int):
        level = logging.INFO

    fmt = logging.Formatter(LOG_FORMAT)
    root = logging.getLogger()
    root.setLevel(level)

    handlers: list[logging.Handler] = []
    if not _has_handler(root, logging.StreamHandler):
        stream = logging.StreamHandler()
        stream.setFormatter(fmt)
        root.addHandler(stream)
        handlers.append(stream)

    log_path = None
    if settings.LOG_DIR:
        log_dir = Path(settings.LOG_DIR).expanduser()
        log_dir.mkdir(parents=True, exist_ok=True)
        log_path = (log_dir / LOG_FILE_NAME).resolve()
        if not _has_handler(root, logging.handlers.RotatingFileHandler, log_path):
            rotating = logging.handlers.RotatingFileHandler(
                log_path, maxBytes=5_000_000, backupCount=3, encoding="utf-8"
            )
            rotating.setFormatter(fmt)
            root.addHandler(rotating)
            handlers.append(rotating)

    # uvicorn garde ses propres handlers ; on y branche les nôtres
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        lg = logging.getLogger(name)
        lg.setLevel(level)
        for h in handlers:
            lg.addHandler(h)

    return log_path
