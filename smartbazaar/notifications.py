# smartbazaar/notifications.py
"""In-app notifications.

`notify` only adds the row to the session it is given, so the notification is
written in the same commit as the order change that caused it; if that write
fails, the whole operation fails rather than silently dropping the message.
"""
from typing import List
from sqlalchemy import func, update
from sqlalchemy.orm import Session

from .exceptions import InvalidInput
from .models import Notification

NEW_MESSAGE = "new_message"
ORDER_UPDATE = "order_update"
NEW_ORDER = "new_order"
NOTIFICATION_TYPES = (NEW_MESSAGE, ORDER_UPDATE, NEW_ORDER)


def notify(db: Session, user_id: str, type: str, title: str, message: str, link: str = "") -> Notification:
    if type not in NOTIFICATION_TYPES:
        raise InvalidInput(f"unknown notification type {type!r}")
    obj = Notification(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        link=link,
        is_read=False,
    )
    db.add(obj)
    return obj


def list_notifications(db: Session, user_id: str, skip: int = 0, limit: int = 50):
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def unread_count(db: Session, user_id: str) -> int:
    return (
        db.query(func.count(Notification.id))
        .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
        .scalar()
    )


def mark_read(db: Session, user_id: str, notification_ids: List[str]) -> int:
    if not notification_ids:
        return 0
    # scoped to the owner so one user can't flip another user's notifications
    stmt = (
        update(Notification)
        .where(Notification.user_id == user_id, Notification.id.in_(notification_ids))
        .values(is_read=True)
    )
    res = db.execute(stmt)
    db.commit()
    return res.rowcount


def mark_all_read(db: Session, user_id: str) -> int:
    stmt = (
        update(Notification)
        .where(Notification.user_id == user_id, Notification.is_read.is_(False))
        .values(is_read=True)
    )
    res = db.execute(stmt)
    db.commit()
    return res.rowcount
