# marketplace/api/dependencies.py
from functools import lru_cache

from marketplace.services.lock_service import LockService
from marketplace.services.notification_service import NotificationService


@lru_cache
def get_lock_service() -> LockService:
    return LockService()


def get_notification_service() -> NotificationService:
    return NotificationService()
