# util/timing.py
import time
from contextlib import contextmanager
from typing import Any, Iterator
import logging


@contextmanager
def timed(logger: logging.Logger, name: str, **kv: Any) -> Iterator[None]:
    """
    Usage:
      with timed(logger, "pdf.extract", pages=10):
          ...
    Emits one INFO on exit: "<name>.done ms=<int> key=val ..."
    Logged on failure too, with ok=False appended.
    """
    t0 = time.perf_counter()
    ok = True
    try:
        yield
    except BaseException:
        ok = False
        raise
    finally:
        dt_ms = int((time.perf_counter() - t0) * 1000)
        suffix = "".join(f" {k}={v}" for k, v in kv.items())
        if not ok:
            suffix += " ok=False"
        logger.info("%s.done ms=%d%s", name, dt_ms, suffix)
