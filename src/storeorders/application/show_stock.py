"""Application service: Show Stock use case (query)."""

from __future__ import annotations

from dataclasses import dataclass

from storeorders.domain.exceptions import ProductNotFound
from storeorders.domain.model.stock import ProductStock
from storeorders.domain.repository.stock_repository import StockRepository


@dataclass(frozen=True)
class StockLineDTO:
    product_id: str
    product_name: str
    bucket: str  # "flat", "size M", "M/Red"
    quantity: int


def _lines(record: ProductStock) -> list[StockLineDTO]:
    lines: list[StockLineDTO] = []
    if record.flat is not None:
        lines.append(StockLineDTO(record.product_id, record.product_name, "flat", record.flat))
    for size, qty in (record.sizes or {}).items():
        lines.append(StockLineDTO(record.product_id, record.product_name, f"size {size}", qty))
    for entry in record.size_colors or []:
        lines.append(
            StockLineDTO(
                record.product_id,
                record.product_name,
                f"{entry.size}/{entry.color}",
                entry.quantity,
            )
        )
    return lines


class ShowStockHandler:

    def __init__(self, stock_repo: StockRepository) -> None:
        self._stock_repo = stock_repo

    def handle(self, product_id: str | None = None) -> list[StockLineDTO]:
        if product_id is None:
            records = self._stock_repo.list_all()
        else:
            record = self._stock_repo.get_by_product_id(product_id)
            if record is None:
                raise ProductNotFound(f"No stock record for product '{product_id}'")
            records = [record]

        lines: list[StockLineDTO] = []
        for record in records:
            lines.extend(_lines(record))
        return lines
