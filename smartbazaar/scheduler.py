# smartbazaar/scheduler.py
from datetime import datetime, timedelta, timezone
from apscheduler.schedulers.background import BackgroundScheduler

from . import config, crud
from .db import SessionLocal
from .utils import logger

scheduler = BackgroundScheduler()

def expire_listings_job(session_factory=SessionLocal, days: int = config.LISTING_EXPIRY_DAYS):
    cutoff = datetime.now(timezone.utc) - timedelta(days=days)
    db = session_factory()
    try:
        n = crud.expire_stale_listings(db, cutoff)
    finally:
        db.close()
    if n:
        logger.info("Expired %d listings older than %d days", n, days)
    return n

def start_scheduler():
    if scheduler.running:
        return scheduler
    scheduler.add_job(expire_listings_job, 'interval', hours=1, id="expire_listings", replace_existing=True)
    scheduler.start()
    logger.info("Scheduler started")
    return scheduler

def stop_scheduler():
    if scheduler.running:
        scheduler.shutdown(wait=False)
