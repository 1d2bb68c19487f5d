import os
import threading
from contextlib import contextmanager
from datetime import datetime
from enum import Enum

from .local_file_strategy import LocalFileStrategy
from .memory_strategy import MemoryStrategy


class Logger:
    """
    Process-wide logger for simulation runs.

    Static class: state lives on the class so engine modules can call
    Logger.log without passing a handle around. Entries below min_priority
    are dropped, and nothing is stored until a storage strategy is set,
    either explicitly, through initialize(), or inside capture().
    """

    class LogPriority(Enum):
        DEBUG = 1
        INFO = 2
        WARNING = 3
        ERROR = 4
        CRITICAL = 5
        DEFAULT = 6

    is_logging_enabled = True
    log_storage_strategy = None
    min_priority = LogPriority.DEBUG
    _log_lock = threading.RLock()
    _strategy_lock = threading.Lock()
    _initialize_lock = threading.Lock()

    @classmethod
    def initialize(cls):
        """
        Attach file storage unless a strategy is already set.

        Environment:
            MOTORNET_LOG_PATH: log file (default /tmp/motornet_logs.txt)
            MOTORNET_LOG_LEVEL: lowest priority name kept (default DEBUG)
        """
        with cls._initialize_lock:
            if cls.log_storage_strategy is not None:
                return
            level = os.getenv("MOTORNET_LOG_LEVEL", "DEBUG").upper()
            if level in cls.LogPriority.__members__:
                cls.set_min_priority(cls.LogPriority[level])
            file_location = os.getenv("MOTORNET_LOG_PATH", "/tmp/motornet_logs.txt")
            cls.set_log_storage_strategy(LocalFileStrategy(file_location))
            cls.log(f"Logger writing to {file_location} (min priority {cls.min_priority.name})",
                    cls.LogPriority.INFO)

    @classmethod
    def log(cls, message, priority=LogPriority.DEBUG):
        """
        Store message if logging is on and priority clears the threshold.

        Parameters:
        message (str): Text of the entry.
        priority (LogPriority): Severity, DEBUG unless given.
        """
        with cls._log_lock:
            if not (cls.is_logging_enabled and cls.log_storage_strategy):
                return
            if priority.value < cls.min_priority.value:
                return
            cls.log_storage_strategy.store_log(
                message, priority.name, datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            )

    @classmethod
    def set_log_storage_strategy(cls, log_storage_strategy):
        with cls._strategy_lock:
            cls.log_storage_strategy = log_storage_strategy

    @classmethod
    def set_min_priority(cls, priority):
        with cls._log_lock:
            cls.min_priority = priority

    @classmethod
    @contextmanager
    def capture(cls, min_priority=None):
        """
        Route entries into a fresh MemoryStrategy for the duration of the block.

        The previous strategy and threshold are restored on exit.

            with Logger.capture() as store:
                generate_network(config, context)
            store.messages("INFO")
        """
        store = MemoryStrategy()
        with cls._log_lock:
            previous = (cls.log_storage_strategy, cls.min_priority)
            cls.set_log_storage_strategy(store)
            if min_priority is not None:
                cls.min_priority = min_priority
        try:
            yield store
        finally:
            with cls._log_lock:
                cls.set_log_storage_strategy(previous[0])
                cls.min_priority = previous[1]

    @classmethod
    def flush_logs(cls):
        with cls._log_lock:
            if cls.is_logging_enabled and cls.log_storage_strategy:
                cls.log_storage_strategy.flush_logs()

    @classmethod
    def disable_logging(cls):
        with cls._log_lock:
            cls.log("Logging disabled")
            cls.is_logging_enabled = False

    @classmethod
    def enable_logging(cls):
        with cls._log_lock:
            cls.is_logging_enabled = True
            cls.log("Logging enabled")
