"""Tests for order notifications."""

from unittest.mock import patch

from celery.exceptions import OperationalError

from marketplace.services.notification_service import (
    NotificationService,
    send_order_created_task,
    send_status_changed_task,
)


def test_order_created_is_queued():
    with patch.object(send_order_created_task, "delay") as delay:
        NotificationService().send_order_created(3, 11, "ORD-3-ABC")
    delay.assert_called_once_with(3, 11, "ORD-3-ABC")


def test_status_change_is_queued():
    with patch.object(send_status_changed_task, "delay") as delay:
        NotificationService().send_status_changed(3, 11, "PENDING", "PAID")
    delay.assert_called_once_with(3, 11, "PENDING", "PAID")


def test_broker_failure_does_not_propagate(caplog):
    with patch.object(send_order_created_task, "delay", side_effect=OperationalError("broker down")):
        NotificationService().send_order_created(3, 11, "ORD-3-ABC")
    assert "broker down" in caplog.text


def test_tasks_run_inline():
    assert send_order_created_task(3, 11, "ORD-3-ABC") == {"user_id": 3, "order_id": 11, "status": "sent"}
    assert send_status_changed_task(3, 11, "PAID", "SHIPPED")["status"] == "sent"
