"""
atelier — cart and checkout engine for a fashion storefront.

    from atelier import cart      # Cart store, lines, persistence
    from atelier import pricing   # Order summaries
    from atelier import checkout  # Shipping → payment → review → order
    from atelier import orders    # Placed orders and their lifecycle

The HTTP surface lives in `atelier.api` and is not imported here.
"""

from atelier import catalog
from atelier import pricing
from atelier import cart
from atelier import payment
from atelier import orders
from atelier import saga
from atelier import checkout
from atelier.config import Settings, DEFAULT_SETTINGS
from atelier.logs import configure_logging
from atelier.shop import Shop
from atelier._types import Cents, Clock, Lazy, utcnow

__version__ = "0.1.0"

__all__ = (
    "catalog",
    "pricing",
    "cart",
    "payment",
    "orders",
    "saga",
    "checkout",
    "Settings",
    "DEFAULT_SETTINGS",
    "configure_logging",
    "Shop",
    "Cents",
    "Clock",
    "Lazy",
    "utcnow",
)
