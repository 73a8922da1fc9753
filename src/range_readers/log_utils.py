import logging

__all__ = ["log", "set_up_logging"]

log = logging.getLogger("range_readers")  # Provided for ease of access in other modules


def set_up_logging(quiet: bool = True, level: int = logging.DEBUG):
    """
    Initialise the log

    Args:
      quiet : Change this flag to True/False to turn off/on console logging
      level : The level to log at (and to attach the console handler at)
    """
    log.setLevel(level)
    log_format = logging.Formatter("[%(asctime)s] [%(levelname)s] - %(message)s")
    if not quiet and not any(
        isinstance(h, logging.StreamHandler) for h in log.handlers
    ):
        console = logging.StreamHandler()
        console.setLevel(level)
        console.setFormatter(log_format)
        log.addHandler(console)
