"""
This is a developer utility that plays back SBS-1 ("BaseStation") data from an archive. It was written to enable
development without a live receiver.

To find data to play back, the script looks for a file named archive.csv in the current working directory, or at the
path given as the first command-line argument. Each line of the archive holds a timestamp in seconds since midnight on
January 1, 1970 UTC, a comma, and then an SBS-1 line exactly as dump1090 sent it on port 30003. The timestamp may be a
rational number with subsecond precision. Lines are printed to stdout with delays computed from the timestamps so that
the replay runs at the same rate as the original feed.

Such an archive can be recorded from a live feed with e.g.:

    nc receiver.local 30003 | while read -r line; do echo "$(date +%s.%N),$line"; done > archive.csv

When the end of the archive is reached, the replay starts over at the beginning. Thus the replay runs indefinitely on
a loop.

To use this script as a feed for the tracker, you can pipe it into `nc`:

    python3 main.py | nc -lk 30003

Then start the tracker against it:

    FEED_HOST=localhost python -m flight_tracker
"""

import sys
import time


ARCHIVE_PATH = sys.argv[1] if len(sys.argv) > 1 else "archive.csv"

while True:
    with open(ARCHIVE_PATH, "rt", encoding="utf-8") as f:
        first_timestamp = None
        t0 = time.time()
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue

            timestamp, _, message = line.partition(",")
            try:
                timestamp = float(timestamp)
            except ValueError as exc:
                print(f"{ARCHIVE_PATH}:{lineno}: {exc}", file=sys.stderr)
                continue

            if first_timestamp is None:
                first_timestamp = timestamp
            else:
                real_elapsed = time.time() - t0
                sim_elapsed = timestamp - first_timestamp
                sleep_needed = sim_elapsed - real_elapsed
                if sleep_needed > 0:
                    time.sleep(sleep_needed)

            print(message, flush=True)
