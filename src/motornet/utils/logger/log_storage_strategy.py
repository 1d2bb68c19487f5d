class LogStorageStrategy:
    """
    Where Logger entries end up.

    Implementations receive already-filtered entries; priority arrives as
    the LogPriority name and timestamp as a formatted wall-clock string.
    """

    def store_log(self, message, priority, timestamp):
        """Persist one entry. Must be overridden."""
        raise NotImplementedError()

    def flush_logs(self):
        """Drop everything stored so far. Must be overridden."""
        raise NotImplementedError()
