"""Root logger configuration for applications embedding b3ind.

Library modules only create module-level loggers; handlers are installed
here, once, by the calling application.
"""

import logging
from pathlib import Path
from typing import Optional, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from b3ind.schemas import InternalConfig

__all__ = ['setup_logging', 'LOG_FORMAT']

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(config: "InternalConfig", log_file: Optional[Union[str, Path]] = None) -> None:
    """Install console (and optional file) handlers on the root logger.

    Existing root handlers are removed, so calling this twice does not
    duplicate output.

    Parameters
    ----------
    config : InternalConfig
        Supplies ``logging.level``.
    log_file : str or Path, optional
        Also write log records to this file (parent directories are created).
    """
    log_level = getattr(logging, config.logging.level)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    root = logging.getLogger()
    root.setLevel(log_level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_path)
        fh.setLevel(log_level)
        fh.setFormatter(formatter)
        root.addHandler(fh)

    ch = logging.StreamHandler()
    ch.setLevel(log_level)
    ch.setFormatter(formatter)
    root.addHandler(ch)

    logger.info("Logging: level=%s, file=%s", config.logging.level, log_file)
