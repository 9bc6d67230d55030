import asyncio
import functools
import io
import os
import signal
import sys
import traceback

from flight_tracker import api, query
import flight_tracker.log
from flight_tracker.config import ConfigurationError, Settings
from flight_tracker.log import log
from flight_tracker.reference import ReferenceData
from flight_tracker.registry import AircraftRegistry
from flight_tracker.tracker import Tracker


async def main() -> int:
    flight_tracker.log.set_src_root(os.path.dirname(__file__))

    try:
        settings = Settings.from_env(os.environ)
    except ConfigurationError as exc:
        log(f"configuration error: {exc}")
        return os.EX_CONFIG

    reference_data = ReferenceData.load(settings.reference_dir) if settings.reference_dir else None
    default_query = query.Query(
        order_by=settings.order_by,
        limit=settings.limit,
        reference=settings.receiver_position,
    )

    tracker = Tracker(AircraftRegistry(settings.timeout))
    server = api.Server(settings.api_host, settings.api_port, tracker, default_query, reference_data)

    def graceful_shutdown(signame: str) -> None:
        log(signame)
        tracker.stop()
        server.stop()

    loop = asyncio.get_running_loop()
    for signame in ("SIGINT", "SIGTERM"):
        loop.add_signal_handler(getattr(signal, signame), functools.partial(graceful_shutdown, signame))

    try:
        tracker.start(settings.feed)
        await asyncio.gather(tracker.join(), server.run())
    except Exception as exc:  # pylint: disable=broad-exception-caught
        log("uncaught exception")
        traceback_buffer = io.StringIO()
        traceback.print_exception(exc, file=traceback_buffer)
        log(traceback_buffer.getvalue())
        return os.EX_SOFTWARE

    return os.EX_OK


if __name__ == "__main__":
    _exit_status = asyncio.run(main())
    log(f"sys.exit({_exit_status})")
    sys.exit(_exit_status)
