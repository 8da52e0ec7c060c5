# smartbazaar/utils.py
"""Shared utilities: logging setup and the retry decorator used by the
transaction runner.
"""
import os
import logging
import time
import uuid
from decimal import Decimal
from functools import wraps
from dotenv import load_dotenv

load_dotenv()

def get_logger(name=__name__):
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        level=getattr(logging, level, logging.INFO)
    )
    return logging.getLogger(name)

logger = get_logger("smartbazaar")

def retry(exceptions, tries=3, delay=1, backoff=2, logger=logger):
    def deco_retry(f):
        @wraps(f)
        def f_retry(*args, **kwargs):
            mtries, mdelay = tries, delay
            while mtries > 1:
                try:
                    return f(*args, **kwargs)
                except exceptions as e:
                    logger.warning("Retryable error: %s, retrying in %s sec", e, mdelay)
                    if mdelay:
                        time.sleep(mdelay)
                    mtries -= 1
                    mdelay *= backoff
            return f(*args, **kwargs)
        return f_retry
    return deco_retry

def new_id() -> str:
    return uuid.uuid4().hex

def format_quantity(value) -> str:
    # 20.000 -> "20", 12.500 -> "12.5"
    return format(Decimal(str(value)).normalize(), "f")
