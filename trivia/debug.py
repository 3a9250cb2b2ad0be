# trivia/debug.py
import json, logging
from pathlib import Path
from .settings import settings

_LOGGER = logging.getLogger("trivia")
if not _LOGGER.handlers:
    level = logging.DEBUG if settings.debug else logging.INFO
    _LOGGER.setLevel(level)
    _LOGGER.propagate = False

    # consola
    sh = logging.StreamHandler()
    sh.setLevel(level)
    sh.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    _LOGGER.addHandler(sh)

    # archivo (json lines), solo si LOG_DIR está seteado
    if settings.log_dir:
        logdir = Path(settings.log_dir)
        logdir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(logdir / "trivia.log", encoding="utf-8")
        fh.setLevel(level)
        fh.setFormatter(logging.Formatter("%(message)s"))  # ya mandamos JSON
        _LOGGER.addHandler(fh)

def get_logger(name: str) -> logging.Logger:
    """Loggers hijos de 'trivia' (heredan handlers)."""
    return _LOGGER.getChild(name)

def trace(event: str, session_id: str, **kv):
    """Log estructurado (una línea JSON) + breve rastro legible en consola."""
    payload = {
        "event": event,
        "session": session_id,
        **kv
    }
    # línea humana (corta)
    _LOGGER.info(f"{event} s={session_id}")
    # línea JSON
    _LOGGER.info(json.dumps(payload, ensure_ascii=False))
