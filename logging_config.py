"""
Console logging for the monitor CLIs.

Usage:
    import logging_config
    logging_config.setup()
"""

import logging
import sys

APP_LOGGERS = ("cycle_arbitrage", "dex")

# Chatty third-party loggers, kept at WARNING unless debugging
NOISY_LOGGERS = ("web3", "urllib3")

LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(message)s"


def _route_app_loggers(level: int) -> None:
    # get_logger attaches a handler per module; drop it so records only
    # reach the root handler once
    logging.getLogger("__main__").setLevel(level)
    for name in list(logging.root.manager.loggerDict):
        if name.split(".")[0] in APP_LOGGERS:
            app_logger = logging.getLogger(name)
            app_logger.handlers.clear()
            app_logger.setLevel(level)


def setup(level=logging.INFO):
    """
    Send all records to stdout with a short time + level prefix.

    RPC client logs are held at WARNING so each pass stays readable.
    """
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%H:%M:%S"))
    root.addHandler(console)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _route_app_loggers(level)


def setup_minimal():
    """Warnings and errors only."""
    setup(level=logging.WARNING)


def setup_debug():
    """Everything, including web3 request logs."""
    setup(level=logging.DEBUG)
    logging.getLogger("web3").setLevel(logging.DEBUG)
