"""
Ingestion of SBS-1 ("BaseStation") data: the comma-separated text format that dump1090 and similar decoders serve on
TCP port 30003, with one message per line.
"""


class DecodingError(ValueError):
    """
    Exception raised for any failure to decode an SBS-1 line. This never escapes Decoder.decode, which reports such
    lines as not applicable instead.
    """


# pylint: disable=wrong-import-position
from flight_tracker.sbs.decoder import Decoder  # noqa: E402
from flight_tracker.sbs.reader import ConnectionState, StreamReader, reconnect_delay  # noqa: E402


__all__ = ["ConnectionState", "Decoder", "DecodingError", "StreamReader", "reconnect_delay"]
