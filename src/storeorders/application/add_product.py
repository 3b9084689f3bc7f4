"""Application service: Add Product use case."""

from __future__ import annotations

from storeorders.domain.exceptions import ValidationError
from storeorders.domain.model.product import Product
from storeorders.domain.model.value_objects import Money
from storeorders.domain.repository.product_repository import ProductRepository


class AddProductHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(
        self,
        name: str,
        price: str,
        category: str = "",
        image: str = "",
    ) -> Product:
        """Add a new product to the catalog."""
        if not name or not name.strip():
            raise ValidationError("Product name is required")

        existing = self._product_repo.get_by_name(name)
        if existing is not None:
            raise ValidationError(f"Product '{name}' already exists")

        # Auto-assign ID based on existing products
        all_products = self._product_repo.list_all()
        if all_products:
            next_id = str(max(int(p.id) for p in all_products) + 1)
        else:
            next_id = "1"

        money = Money.of(price)
        if money.is_zero:
            raise ValidationError("Product price must be greater than zero")

        product = Product(
            id=next_id,
            name=name.strip(),
            price=money,
            category=category,
            image=image,
        )
        self._product_repo.save(product)
        return product
