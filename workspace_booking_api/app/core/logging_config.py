"""
Logging setup for the booking service.

Every module logs through ``logging.getLogger(__name__)``, so records
are named after the package path, e.g.
``workspace_booking_api.app.services.admission``.  What ends up in the
log at the default INFO level:

* ``services.*_service``: one INFO line per committed write (ids,
  cascade counts);
* ``services.admission``: one WARNING per rejected candidate with the
  violation kind;
* ``core.exception_handlers``: ERROR with traceback for unexpected
  failures.

uvicorn's per-request access lines are raised to WARNING unless the
level is DEBUG, so admission decisions are not buried.
"""

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Attach console (and optional file) handlers to the root logger.

    Runs once: if the root logger already has handlers (pytest's
    capture, a second ``create_app``), it is left alone.  ``level`` is
    a name such as ``"debug"``; unknown names fall back to INFO.
    ``logfile`` comes from ``LOG_FILE``.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root.setLevel(numeric_level)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers = [logging.StreamHandler()]
    if logfile:
        handlers.append(logging.FileHandler(Path(logfile).resolve(), encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    if numeric_level > logging.DEBUG:
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
