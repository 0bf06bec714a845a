import logging
import sys
from typing import Dict, Optional, Union

from tqdm import tqdm

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s:%(lineno)d] - %(message)s"


class LogWithTqdm(logging.Handler):
    """
    A logging handler that writes through `tqdm.write()`, so log lines
    do not tear the progress bar of a full-site scan.
    """
    def emit(self, record):
        try:
            msg = self.format(record)
            # Write to stderr for consistency with tqdm's default stream.
            tqdm.write(msg, file=sys.stderr)
            self.flush()
        except Exception:
            self.handleError(record)


def _to_level(level: Union[str, int, None], fallback: int) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), fallback)
    return level if isinstance(level, int) else fallback


def configure_logger(
        general_level: Union[str, int, None] = 'INFO',
        silenced_loggers: Optional[Dict[str, Union[str, int]]] = None
) -> None:
    """
    Configures the root logger with a TQDM-friendly handler and muzzles
    noisy third-party loggers.
    """
    handler = LogWithTqdm()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root_logger = logging.getLogger()
    root_logger.setLevel(_to_level(general_level, logging.INFO))
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for name, level in (silenced_loggers or {}).items():
        logging.getLogger(name).setLevel(_to_level(level, logging.CRITICAL))
