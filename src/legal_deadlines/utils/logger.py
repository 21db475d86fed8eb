"""
Logger Utility
Console logging for the engine and the append-only deadline audit trail
"""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Union

from ..core.models import to_iso, utc_now

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logger(name: str, level: str = "INFO", log_dir: Optional[Union[str, Path]] = None) -> logging.Logger:
    """
    Configure the engine logger used by the command line

    Records go to stderr; deadline JSON printed by the CLI owns stdout.
    Calling this twice for the same name keeps the first handlers.

    Args:
        name: Logger name, usually the package name
        level: Level name such as INFO or DEBUG
        log_dir: Directory for a daily errors_YYYYMMDD.log; console only when omitted

    Returns:
        Configured logger
    """

    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(getattr(logging, level.upper()))
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        error_handler = logging.FileHandler(
            log_path / f"errors_{datetime.now().strftime('%Y%m%d')}.log",
            encoding='utf-8'
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(formatter)
        logger.addHandler(error_handler)

    return logger


class AuditLogger:
    """
    Audit trail for persisted deadlines
    One JSON object per line: UTC timestamp, event name and payload
    """

    def __init__(self, log_file: Union[str, Path] = "logs/audit.jsonl"):
        self.log_file = Path(log_file)
        self.log_file.parent.mkdir(parents=True, exist_ok=True)

    def log(self, event: str, data: Dict) -> Dict:
        """
        Append an audit entry

        Args:
            event: Dotted event name, e.g. deadline.auto_upserted
            data: JSON-serializable payload (case id, deadline ids, ...)

        Returns:
            The entry as written
        """

        entry = {
            "timestamp": to_iso(utc_now()),
            "event": event,
            "data": data
        }

        with open(self.log_file, 'a', encoding='utf-8') as f:
            f.write(json.dumps(entry, ensure_ascii=False) + '\n')

        return entry
