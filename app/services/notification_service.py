# app/services/notification_service.py
from app.celery_worker import celery_app
from app.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Serwis do wysyłania powiadomień.
    Używa Celery do asynchronicznego przetwarzania.
    """

    @staticmethod
    def send_order_confirmation(order_number: str, customer_email: str):
        """
        Wysyła potwierdzenie złożenia zamówienia.
        """
        send_order_confirmation_task.delay(order_number, customer_email)


@celery_app.task(name="app.services.notification_service.send_order_confirmation_task")
def send_order_confirmation_task(order_number: str, customer_email: str):
    """
    Celery task - w prawdziwym systemie wysłałby email.
    Teraz tylko loguje.
    """
    logger.info(f"[NOTIFICATION] {customer_email}: order {order_number} received")

    return {"order_number": order_number, "email": customer_email, "status": "sent"}
