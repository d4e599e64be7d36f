#   Copyright 2026 UCP Authors
#
#   Licensed under the Apache License, Version 2.0 (the "License");
#   you may not use this file except in compliance with the License.
#   You may obtain a copy of the License at
#
#       http://www.apache.org/licenses/LICENSE-2.0
#
#   Unless required by applicable law or agreed to in writing, software
#   distributed under the License is distributed on an "AS IS" BASIS,
#   WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#   See the License for the specific language governing permissions and
#   limitations under the License.

"""Collaborators the checkout session depends on.

The checkout does not own the cart, the signed-in user, order storage,
navigation or the alert dialog. Each of them is an interface here, together
with an in-memory implementation used by the demo driver and the tests.
"""

from abc import ABC
from abc import abstractmethod
import logging
from typing import Iterable, List, Optional, Tuple
import uuid

from .models import CartLineItem
from .models import Order
from .models import User
from .pricing import to_minor_units

logger = logging.getLogger(__name__)


class CartStore(ABC):
  """Read access to the cart, plus clearing it once an order is placed."""

  @abstractmethod
  def get_items(self) -> List[CartLineItem]:
    """Returns a snapshot of the cart line items."""

  @abstractmethod
  def get_total(self) -> int:
    """Returns the running cart total in cents."""

  @abstractmethod
  def clear(self) -> None:
    """Removes every line item from the cart."""


class AuthContext(ABC):

  @abstractmethod
  def current_user(self) -> Optional[User]:
    """Returns the signed-in user, if any."""


class OrderStore(ABC):

  @abstractmethod
  def create_order(self, order: Order) -> Order:
    """Persists a new order and returns it."""


class Navigator(ABC):

  @abstractmethod
  def replace(self, route: str) -> None:
    """Replaces the current screen with `route`."""

  @abstractmethod
  def back(self) -> None:
    """Leaves the current screen."""


class Notifier(ABC):

  @abstractmethod
  def alert(self, title: str, message: str) -> None:
    """Shows a modal alert to the user."""


class InMemoryCart(CartStore):
  """Cart held in a list, mainly for demos and tests."""

  def __init__(self, items: Iterable[CartLineItem] = ()):
    self._items = list(items)

  def add_item(self, item: CartLineItem) -> None:
    self._items.append(item)

  def get_items(self) -> List[CartLineItem]:
    return list(self._items)

  def get_total(self) -> int:
    return sum(to_minor_units(item.line_total) for item in self._items)

  def clear(self) -> None:
    self._items.clear()


class StaticAuth(AuthContext):

  def __init__(self, user: Optional[User] = None):
    self._user = user

  def current_user(self) -> Optional[User]:
    return self._user


class InMemoryOrderStore(OrderStore):
  """Keeps orders in a dict keyed by order id.

  Orders arriving without an id get a fresh uuid4.
  """

  def __init__(self):
    self._orders: dict[str, Order] = {}

  @property
  def orders(self) -> List[Order]:
    return list(self._orders.values())

  def get_order(self, order_id: str) -> Optional[Order]:
    return self._orders.get(order_id)

  def create_order(self, order: Order) -> Order:
    if not order.id:
      order = order.model_copy(update={"id": str(uuid.uuid4())})
    if order.id in self._orders:
      raise ValueError(f"Order {order.id} already exists")
    self._orders[order.id] = order
    logger.info("Stored order %s", order.id)
    return order


class RecordingNavigator(Navigator):
  """Records the navigation calls it receives."""

  def __init__(self):
    self.history: List[str] = []
    self.back_count = 0

  @property
  def current_route(self) -> Optional[str]:
    return self.history[-1] if self.history else None

  def replace(self, route: str) -> None:
    logger.info("Navigating to %s", route)
    self.history.append(route)

  def back(self) -> None:
    logger.info("Navigating back")
    self.back_count += 1


class LoggingNotifier(Notifier):
  """Logs every alert and keeps it for later inspection."""

  def __init__(self):
    self.alerts: List[Tuple[str, str]] = []

  @property
  def last_alert(self) -> Optional[Tuple[str, str]]:
    return self.alerts[-1] if self.alerts else None

  def alert(self, title: str, message: str) -> None:
    logger.info("Alert: %s - %s", title, message)
    self.alerts.append((title, message))
