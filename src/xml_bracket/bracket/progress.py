"""Progress notifications for long conversions."""

import sys
import time
from typing import Callable, Optional, TextIO

from xml_bracket.shared.logging import RunLogger, get_logger
from xml_bracket.shared.result import current_memory_bytes

# Called with the cumulative number of completed records
ProgressCallback = Callable[[int], None]


class ProgressReporter:
    """Print a line to the diagnostic stream at every record milestone.

    The transducer decides when a milestone is reached; the reporter only
    formats it. Output is observational and not meant to be parsed.
    """

    def __init__(self, stream: Optional[TextIO] = None,
                 logger: Optional[RunLogger] = None):
        self.stream = stream
        self.logger = logger or get_logger(__name__, component="progress")
        self.start_time = time.time()
        self.notifications = 0

    def __call__(self, records: int) -> None:
        self.notifications += 1
        elapsed = time.time() - self.start_time
        rate = records / elapsed if elapsed > 0 else 0.0

        print(f"{records} trees parsed", file=self.stream or sys.stderr)
        self.logger.debug(
            "Progress milestone",
            extra={
                "records": records,
                "records_per_second": round(rate, 1),
                "rss_bytes": current_memory_bytes(),
            },
        )
