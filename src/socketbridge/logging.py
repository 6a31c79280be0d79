import logging


_LOGGERS: list[logging.Logger] = []
_LEVEL = logging.INFO


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
        logger.addHandler(handler)
        _LOGGERS.append(logger)
    logger.setLevel(_LEVEL)
    return logger


def set_log_level(level: str | int):
    """Applies ``level`` to every logger handed out by :func:`get_logger`,
    including ones created afterwards."""
    global _LEVEL
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {level}")
    _LEVEL = level
    for logger in _LOGGERS:
        logger.setLevel(level)
