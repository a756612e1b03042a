from typing import Dict, Protocol

from .domain import Order
from .errors import SaveError
from .ftypes import Either


class OrderSink(Protocol):
    """Хранилище заказов/чеков: save возвращает место сохранения или SaveError"""

    def save(self, order: Order) -> Either[SaveError, str]: ...


class InMemoryOrderSink:
    """Хранит заказы в памяти процесса, адрес — 'memory://<order_id>'"""

    def __init__(self) -> None:
        self.orders: Dict[str, Order] = {}

    def save(self, order: Order) -> Either[SaveError, str]:
        if order.order_id in self.orders:
            return Either.left(SaveError(f"order {order.order_id} already saved"))
        self.orders[order.order_id] = order
        return Either.right(f"memory://{order.order_id}")
