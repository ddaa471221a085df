from __future__ import annotations
import json, logging, sys
from typing import Any, Dict

_RESERVED = frozenset((
    "name", "msg", "args", "levelname", "levelno",
    "pathname", "filename", "module", "exc_info",
    "exc_text", "stack_info", "lineno", "funcName",
    "created", "msecs", "relativeCreated", "thread",
    "threadName", "processName", "process", "taskName",
))

def _jsonable(v: Any) -> Any:
    # numpy scalars and tuples of floats show up in layout/classify payloads
    if hasattr(v, "item") and callable(v.item):
        try:
            return v.item()
        except (TypeError, ValueError):
            return str(v)
    if isinstance(v, (list, tuple)):
        return [_jsonable(x) for x in v]
    return v

class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        # attach extra if present
        for k, v in getattr(record, "__dict__", {}).items():
            if k not in _RESERVED:
                payload[k] = _jsonable(v)
        return json.dumps(payload, separators=(",", ":"), default=str)

def get_logger(name: str = "healthmap", level: str = "INFO", structured_json: bool = True) -> logging.Logger:
    """
    Configure (once) and return a stdout logger.

    Module loggers are `logging.getLogger(__name__)` children of "healthmap",
    so configuring the package logger here routes every module through it.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    handler = logging.StreamHandler(sys.stdout)
    if structured_json:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
