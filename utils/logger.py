import functools
import logging
import time
import uuid
from collections.abc import Sized
from typing import Optional

# Niveau de log des appels instrumentés
LOG_LEVELS = {"NONE": 0, "BASIC": 1, "DETAILED": 2}
LOG_LEVEL = LOG_LEVELS["BASIC"]

# ID unique pour chaque session
SESSION_ID = uuid.uuid4().hex[:8]

_ROOT_LOGGER_NAME = "los_overlay"
_CALLS_LOGGER_NAME = "los_overlay.calls"
_configured = False


def set_log_level(name: str) -> int:
    """Change the call-tracing level (``NONE``, ``BASIC`` or ``DETAILED``)."""

    global LOG_LEVEL
    try:
        LOG_LEVEL = LOG_LEVELS[name.upper()]
    except KeyError:
        raise ValueError(f"Unknown log level {name!r}; expected one of {sorted(LOG_LEVELS)}") from None
    return LOG_LEVEL


def get_logger(name: Optional[str] = None, level: int = logging.INFO) -> logging.Logger:
    """Return a project logger, attaching a stream handler on first use."""

    global _configured
    root = logging.getLogger(_ROOT_LOGGER_NAME)
    if not _configured:
        if not root.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(
                logging.Formatter(f"[%(levelname)s] [{SESSION_ID}] %(name)s: %(message)s")
            )
            root.addHandler(handler)
        root.setLevel(level)
        _configured = True

    if name is None:
        return root
    return logging.getLogger(name)


def _summarise(value: object) -> str:
    if isinstance(value, Sized) and not isinstance(value, (str, bytes)):
        return f"<{type(value).__name__} with {len(value)} entries>"
    return repr(value)


def log_calls(func):
    """Décorateur pour logger les appels de fonctions et mesurer leur temps d'exécution."""

    calls_logger = logging.getLogger(_CALLS_LOGGER_NAME)

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        if LOG_LEVEL == 0 or not calls_logger.isEnabledFor(logging.DEBUG):
            return func(*args, **kwargs)

        calls_logger.debug("Appel %s args=%r kwargs=%r", func.__qualname__, args, kwargs)

        start_time = time.perf_counter()
        result = func(*args, **kwargs)
        elapsed = time.perf_counter() - start_time

        if LOG_LEVEL >= 2:
            calls_logger.debug("Retour %s: %s", func.__qualname__, _summarise(result))
            calls_logger.debug("Temps d'exécution %s: %.6f s", func.__qualname__, elapsed)

        return result

    return wrapper
