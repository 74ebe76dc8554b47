"""Customer emails for order events. Best-effort: never raises."""
import logging

from core.config import settings
from core.money import format_amount, to_minor
from models.order import Order
from services.email import send_templated_email

logger = logging.getLogger("grocer.email")

STATUS_LABELS = {
    "pending": "Pending",
    "confirmed": "Confirmed",
    "preparing": "Being prepared",
    "out_for_delivery": "Out for delivery",
    "delivered": "Delivered",
    "cancelled": "Cancelled",
}



def _base_context(order: Order) -> dict:
    tenant = order.tenant
    return {
        "customer_name": order.customer_name,
        "order_number": order.order_number,
        "store_name": tenant.name if tenant else "",
        "currency": tenant.currency if tenant else settings.DEFAULT_CURRENCY,
    }


def _confirmation_context(order: Order) -> dict:
    context = _base_context(order)
    context.update(
        items=[
            {
                "product_name": item.product_name,
                "quantity": item.quantity,
                "unit_price": format_amount(to_minor(item.unit_price)),
                "total_price": format_amount(to_minor(item.total_price)),
            }
            for item in order.items
        ],
        subtotal=format_amount(to_minor(order.subtotal)),
        delivery_fee=format_amount(to_minor(order.delivery_fee)),
        total=format_amount(to_minor(order.total)),
        delivery_address=order.delivery_address,
        customer_phone=order.customer_phone,
    )
    return context


def notify_order_created(order: Order) -> None:
    if not settings.ORDER_EMAILS_ENABLED or not order.customer_email:
        return
    # Loading items or tenant may hit the database; that counts as an email failure too
    try:
        send_templated_email(
            order.customer_email,
            f"Order {order.order_number} received",
            "emails/order_confirmation.txt",
            _confirmation_context(order),
        )
    except Exception:
        logger.warning("Order confirmation email failed for %s", order.order_number, exc_info=True)


def notify_status_changed(order: Order) -> None:
    if not settings.ORDER_EMAILS_ENABLED or not order.customer_email:
        return
    try:
        context = _base_context(order)
        context.update(status=order.status, status_label=STATUS_LABELS.get(order.status, order.status))
        send_templated_email(
            order.customer_email,
            f"Order {order.order_number}: {context['status_label']}",
            "emails/order_status.txt",
            context,
        )
    except Exception:
        logger.warning("Status email failed for %s", order.order_number, exc_info=True)
