"""JSON-file-backed implementation of StockRepository."""

from __future__ import annotations

from pathlib import Path

from storeorders.domain.exceptions import ConcurrencyConflict
from storeorders.domain.model.stock import ProductStock, SizeColorStock
from storeorders.domain.repository.stock_repository import StockRepository
from storeorders.infrastructure.persistence.json_file import JsonFile


class JsonStockRepository(StockRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- StockRepository interface --------------------------------------------

    def get_by_product_id(self, product_id: str) -> ProductStock | None:
        for raw in self._file.load():
            if raw["product_id"] == product_id:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[ProductStock]:
        return [self._to_domain(raw) for raw in self._file.load()]

    def save_all(self, records: list[ProductStock]) -> None:
        with self._file.locked():
            stored = {raw["product_id"]: raw for raw in self._file.load()}

            # Check every version before changing anything.
            for record in records:
                current = stored.get(record.product_id, {}).get("version", 0)
                if current != record.version:
                    raise ConcurrencyConflict(
                        f"Stock for {record.product_name} changed concurrently "
                        f"(expected version {record.version}, found {current})"
                    )

            for record in records:
                raw = self._to_raw(record)
                raw["version"] = record.version + 1
                stored[record.product_id] = raw

            self._file.persist(list(stored.values()))

        for record in records:
            record.version += 1

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(record: ProductStock) -> dict:
        return {
            "product_id": record.product_id,
            "product_name": record.product_name,
            "flat": record.flat,
            "sizes": dict(record.sizes) if record.sizes is not None else None,
            "size_colors": (
                [
                    {"size": e.size, "color": e.color, "quantity": e.quantity}
                    for e in record.size_colors
                ]
                if record.size_colors is not None
                else None
            ),
            "version": record.version,
        }

    @staticmethod
    def _to_domain(raw: dict) -> ProductStock:
        size_colors = raw.get("size_colors")
        return ProductStock(
            product_id=raw["product_id"],
            product_name=raw.get("product_name", raw["product_id"]),
            flat=raw.get("flat"),
            sizes=dict(raw["sizes"]) if raw.get("sizes") is not None else None,
            size_colors=(
                [SizeColorStock(e["size"], e["color"], e["quantity"]) for e in size_colors]
                if size_colors is not None
                else None
            ),
            version=raw.get("version", 0),
        )
