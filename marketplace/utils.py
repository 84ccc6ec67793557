# marketplace/utils.py
"""Logging for the listing service.

Request handlers, the estate id cache and the refill workers all log under
the `marketplace` logger, so one `LOG_LEVEL` covers the request path and the
background refills. APScheduler's own per-job chatter is held at WARNING;
refill failures are reported by the scheduler's error listener instead.
"""
import os
import logging
from dotenv import load_dotenv

load_dotenv()

ROOT_LOGGER = "marketplace"
LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"

def get_logger(name=ROOT_LOGGER):
    level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    logging.basicConfig(format=LOG_FORMAT, level=level)
    logging.getLogger("apscheduler").setLevel(max(level, logging.WARNING))
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = "%s.%s" % (ROOT_LOGGER, name)
    return logging.getLogger(name)

logger = get_logger()
