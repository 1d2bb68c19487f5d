import os
from datetime import datetime

from .log_storage_strategy import LogStorageStrategy


class LocalFileStrategy(LogStorageStrategy):
    """
    Plain-text log file, one "[timestamp] [PRIORITY] message" line per entry.

    The file is truncated when the strategy is created and on flush, so a
    file always holds a single run.
    """

    def __init__(self, file_location):
        self.file_location = os.path.abspath(file_location)
        os.makedirs(os.path.dirname(self.file_location), exist_ok=True)
        self._write("w", f"MOTORNET LOG STARTED: {datetime.now()}\n")

    def _write(self, mode, text):
        with open(self.file_location, mode) as log_file:
            log_file.write(text)

    def store_log(self, message, priority, timestamp):
        self._write("a", f"[{timestamp}] [{priority}] {message}\n")

    def flush_logs(self):
        self._write("w", f"LOG FLUSHED: {datetime.now()}\n")
