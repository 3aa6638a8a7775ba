"""
Logging Configuration
Sets up the package logger for the render and preview commands.
"""
import logging
import sys
from typing import Optional

# Third-party loggers that flood DEBUG output (PNG chunk dumps, decoder backend selection)
NOISY_LOGGERS = ("PIL", "audioread", "numba")


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    quiet_libraries: bool = True,
) -> logging.Logger:
    """
    Configures the logger for the 'hyperscope' namespace.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file: Optional path to save logs to a file.
        quiet_libraries: Keep Pillow/audioread/numba at WARNING even when
            ``level`` is DEBUG.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger("hyperscope")
    logger.setLevel(level)
    # Handlers live here only; the root logger stays untouched
    logger.propagate = False

    # Re-running a CLI in the same interpreter must not stack handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if quiet_libraries:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logger.debug("Logging initialized at %s", logging.getLevelName(level))
    return logger
