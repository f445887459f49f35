from __future__ import annotations

import json
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict

_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO", log_dir: Path | None = None) -> None:
    root_logger = logging.getLogger()
    if root_logger.handlers:
        return
    normalized = level.strip().upper() or "INFO"
    root_logger.setLevel(getattr(logging, normalized, logging.INFO))

    formatter = logging.Formatter(_FORMAT)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_dir / "testpilot-llm.log", maxBytes=5 * 1024 * 1024, backupCount=5
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def log_event(logger: logging.Logger, event: str, **payload: Any) -> None:
    record: Dict[str, Any] = {"event": event, **payload}
    logger.info(json.dumps(record, default=str))
