# dawazon/services/notification_service.py
from kombu.exceptions import OperationalError
from sqlalchemy.orm import Session

from dawazon.celery_worker import celery_app
from dawazon.data.database import SessionLocal
from dawazon.domain.cart import Cart
from dawazon.domain.errors import InvalidState, NotFound
from dawazon.repos.cart_repo import CartRepo
from dawazon.services.email_channel import EmailPort, get_email_channel
from dawazon.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Serwis do wysylania powiadomien.
    Uzywa Celery do asynchronicznego przetwarzania.
    """

    @staticmethod
    def send_order_confirmation(cart_id: str):
        """
        Wrzuca mail z potwierdzeniem zamowienia do kolejki.
        Zamowienie jest juz zapisane - awaria brokera nie moze go cofnac.
        """
        try:
            send_order_confirmation_task.delay(cart_id)
        except OperationalError as e:
            logger.error("Could not enqueue order confirmation", cart_id=cart_id, error=str(e))


def render_order_confirmation(cart: Cart) -> tuple[str, str]:
    subject = f"Dawazon - order {cart.id} confirmed"

    lines = [f"Hello {cart.client.name},", "", "Thank you for your order.", ""]
    for line in cart.cart_lines:
        lines.append(
            f"  {line.quantity} x {line.product_id} @ {line.product_price} EUR = {line.total_price} EUR"
        )
    lines += [
        "",
        f"Items: {cart.total_items}",
        f"Total: {cart.total} EUR",
    ]

    address = cart.client.address
    if address:
        street = f"{address.street} {address.number}" if address.number is not None else address.street
        lines += [
            "",
            "Shipping to:",
            f"  {street}",
            f"  {address.postal_code} {address.city}",
            f"  {address.country}",
        ]

    return subject, "\n".join(lines)


def deliver_order_confirmation(db: Session, cart_id: str, channel: EmailPort) -> dict:
    cart = CartRepo(db).get_cart(cart_id)
    if cart is None:
        raise NotFound(f"Cart {cart_id} not found")
    if not cart.purchased:
        raise InvalidState(f"Cart {cart_id} is not purchased")

    if cart.client is None or not cart.client.email:
        logger.warning("Order confirmation skipped, no client e-mail", cart_id=cart_id)
        return {"cart_id": cart_id, "status": "skipped"}

    subject, body = render_order_confirmation(cart)
    result = channel.send(to=cart.client.email, subject=subject, body=body)

    logger.info("Order confirmation sent", cart_id=cart_id, to=cart.client.email, message_id=result.message_id)
    return {"cart_id": cart_id, "status": "sent", "message_id": result.message_id}


@celery_app.task(name="dawazon.services.notification_service.send_order_confirmation_task")
def send_order_confirmation_task(cart_id: str):
    db = SessionLocal()
    try:
        return deliver_order_confirmation(db, cart_id, get_email_channel())
    finally:
        db.close()
