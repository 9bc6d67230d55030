import inspect
import os
import sys
from typing import Any

from flight_tracker.util import maybe


_src_root = ""  # pylint: disable=invalid-name


def set_src_root(path: str) -> None:
    """
    Set the directory prefix to strip from filenames in log message context.
    """
    global _src_root
    _src_root = os.path.abspath(path)
    if not _src_root.endswith(os.sep):
        _src_root += os.sep


def _context() -> str:
    # Frames: [0] this lambda, [1] maybe, [2] _context, [3] log, [4] whoever called log.
    # fmt: off
    frame    = maybe(lambda: inspect.stack()[4].frame                )
    caller   = maybe(lambda: inspect.getframeinfo(frame)             ) if frame  else None
    filename = maybe(lambda: caller.filename.removeprefix(_src_root) ) if caller else None
    lineno   = maybe(lambda: caller.lineno                           ) if caller else None
    qualname = maybe(lambda: frame.f_code.co_qualname                ) if frame  else None
    # fmt: on

    context = ""
    if filename and lineno is not None:
        context += f"{filename}:{lineno}:"
    if qualname:
        context += f"{qualname}:"
    return context


def log(*args: object, **kwargs: Any) -> None:
    """
    Log a message to the console prefixed with caller context. The arguments to this function are passed directly to
    print() after the context is printed. Output goes to stderr unless `file` is given, and is flushed immediately so
    that messages from the ingest loop interleave correctly with those of the API server.
    """
    kwargs.setdefault("file", sys.stderr)
    kwargs.setdefault("flush", True)

    context = _context()
    if context:
        print(context, end=" ", file=kwargs["file"])

    print(*args, **kwargs)
