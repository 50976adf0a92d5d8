"""
orderkit — client-side order lifecycle for a remote commerce API.

    from orderkit import Adapter, Config
    from orderkit import order as O      # Order aggregate, line items, validators
    from orderkit import storage as St   # Where the session survives restarts
    from orderkit import codec           # Cyclic-safe codec + sanitizer

    adapter = Adapter(Config.from_env(), storage=St.MemoryStorage())
    order = adapter.new_order(location_id=19, service_type="pickup")
    await order.add_line_item(product, 2)
    await adapter.persist_current_order(order)
"""

from orderkit import order
from orderkit import storage
from orderkit import codec
from orderkit import adapter
from orderkit._config import Config
from orderkit._logging import setup_logging
from orderkit.adapter import Adapter
from orderkit.order import Order, LineItem
from orderkit._types import (
    Lazy,
    Payload,
    FieldErrors,
)

__version__ = "0.1.0"

__all__ = (
    "order",
    "storage",
    "codec",
    "adapter",
    "Config",
    "setup_logging",
    "Adapter",
    "Order",
    "LineItem",
    "Lazy",
    "Payload",
    "FieldErrors",
)
