# marketplace/services/notification_service.py
from marketplace.celery_worker import celery_app
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Powiadomienia o zamowieniach wysylane przez Celery.
    Wywolywane dopiero po commicie - blad kolejki nie cofa zamowienia.
    """

    def send_order_created(self, user_id: int, order_id: int, order_number: str):
        self._dispatch(send_order_created_task, user_id, order_id, order_number)

    def send_status_changed(self, user_id: int, order_id: int, old_status: str, new_status: str):
        self._dispatch(send_status_changed_task, user_id, order_id, old_status, new_status)

    @staticmethod
    def _dispatch(task, *args):
        try:
            task.delay(*args)
        except Exception as e:
            logger.warning(f"Nie udalo sie zakolejkowac powiadomienia {task.name}: {e}")


@celery_app.task(name="marketplace.services.notification_service.send_order_created_task")
def send_order_created_task(user_id: int, order_id: int, order_number: str):
    """
    W prawdziwym systemie email/SMS/push, teraz tylko log.
    """
    logger.info(f"[NOTIFICATION] User {user_id}: order {order_number} (id={order_id}) created")
    return {"user_id": user_id, "order_id": order_id, "status": "sent"}


@celery_app.task(name="marketplace.services.notification_service.send_status_changed_task")
def send_status_changed_task(user_id: int, order_id: int, old_status: str, new_status: str):
    logger.info(f"[NOTIFICATION] User {user_id}: order {order_id} {old_status} -> {new_status}")
    return {"user_id": user_id, "order_id": order_id, "status": "sent"}
