"""
Logging setup for the command line and embedding applications.
"""

import logging
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def init_logging(level: Union[int, str] = logging.INFO, log_file: Optional[Union[str, Path]] = None) -> None:
    """
    Configure the root logger once.

    Calling again only adjusts the level, and adds the file handler if it
    is not attached yet.
    """
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    root.setLevel(level)

    if log_file is None:
        return

    log_path = Path(log_file).resolve()
    # Don't add the same file handler twice
    if not any(
        isinstance(h, logging.FileHandler) and getattr(h, "baseFilename", "") == str(log_path)
        for h in root.handlers
    ):
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_path, encoding="utf-8")
        fh.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(fh)
