from .log_storage_strategy import LogStorageStrategy


class MemoryStrategy(LogStorageStrategy):
    """
    Keeps log entries in a list of (timestamp, priority, message) tuples.
    Used by tests and by callers that want to inspect a run's log.
    """

    def __init__(self):
        self.entries = []

    def store_log(self, message, priority, timestamp):
        self.entries.append((timestamp, priority, message))

    def flush_logs(self):
        self.entries.clear()

    def messages(self, priority=None):
        """Logged messages, optionally filtered by priority name."""
        return [m for _, p, m in self.entries if priority is None or p == priority]
