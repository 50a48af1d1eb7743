"""
Owner order dashboard: counters and status changes.

Order status and payment status are edited separately on the dashboard.
Changing one always writes the other's current value back unchanged.
"""

import logging
from typing import Iterable

from wirebazaar.core.exceptions import OrderNotFoundError
from wirebazaar.database.storefront_db import StorefrontDatabase, storefront_db
from wirebazaar.models.storefront import Order, OrderStats, OrderStatus, PaymentStatus

logger = logging.getLogger(__name__)


def compute_order_stats(orders: Iterable[Order]) -> OrderStats:
    """
    Revenue counts only orders whose payment is completed; cancelled orders
    are still counted in the total.
    """
    stats = OrderStats()
    for order in orders:
        stats.total += 1
        if order.status == OrderStatus.PENDING:
            stats.pending += 1
        elif order.status == OrderStatus.PROCESSING:
            stats.processing += 1
        elif order.status == OrderStatus.SHIPPED:
            stats.shipped += 1
        elif order.status == OrderStatus.DELIVERED:
            stats.delivered += 1

        if order.payment_status == PaymentStatus.COMPLETED:
            stats.revenue += order.total_amount

    stats.revenue = round(stats.revenue, 2)
    return stats


class OrderDashboard:
    def __init__(self, db: StorefrontDatabase = storefront_db):
        self.db = db

    async def _require_order(self, order_id: str) -> Order:
        order = await self.db.get_order_by_id(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    async def stats(self) -> OrderStats:
        return compute_order_stats(await self.db.get_all_orders())

    async def set_status(self, order_id: str, status: OrderStatus) -> Order:
        order = await self._require_order(order_id)
        await self.db.update_order_status(order_id, status, order.payment_status)
        logger.info(
            f"Order status {order.status} -> {status}",
            extra={"order_number": order.order_number, "order_id": order_id},
        )
        return order.model_copy(update={"status": OrderStatus(status).value})

    async def set_payment_status(self, order_id: str, payment_status: PaymentStatus) -> Order:
        order = await self._require_order(order_id)
        await self.db.update_order_status(order_id, order.status, payment_status)
        logger.info(
            f"Order payment {order.payment_status} -> {payment_status}",
            extra={"order_number": order.order_number, "order_id": order_id},
        )
        return order.model_copy(update={"payment_status": PaymentStatus(payment_status).value})


order_dashboard = OrderDashboard()
