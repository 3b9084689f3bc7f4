"""Product aggregate.

Products live independently of orders. Orders copy the fields they need
(name, price, image, category) at creation time, so catalog edits never
reach back into historical orders.
"""

from __future__ import annotations

from dataclasses import dataclass

from storeorders.domain.model.value_objects import Money


@dataclass
class Product:
    """A product in the catalog, as far as checkout needs to know it."""

    id: str
    name: str
    price: Money
    category: str = ""
    image: str = ""

