"""
Generally useful stuff that doesn't fit anywhere else
"""

from collections.abc import Callable
import traceback
from typing import TypeVar

T = TypeVar("T")


def maybe(dangerous: Callable[[], T]) -> T | None:
    """
    Executes a callable (function, lambda, etc.) and returns the result. If the callable raises an exception, the
    exception is caught and discarded, and None is returned.
    """
    try:
        return dangerous()
    except Exception:  # pylint: disable=broad-exception-caught
        return None


def notify_all(listeners: list[Callable[[T], None]], event: T) -> None:
    """
    Call every listener with `event`. A listener that raises does not prevent the others from being called; its
    traceback is logged instead.
    """
    # Imported here because the log module depends on this one.
    from flight_tracker.log import log  # pylint: disable=import-outside-toplevel

    for listener in list(listeners):
        try:
            listener(event)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            log(f"listener {listener!r} failed on {event!r}")
            for line in traceback.format_exception(exc):
                log(line.rstrip())
