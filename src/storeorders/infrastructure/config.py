"""Runtime settings, read from ``STOREORDERS_*`` environment variables or ``.env``."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from storeorders.domain.model.value_objects import Money
from storeorders.domain.service.order_total_calculator import CheckoutFees

# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


class Settings(BaseSettings):

    data_dir: Path = Field(default=_DEFAULT_DATA_DIR)
    log_level: str = Field(default="WARNING")

    currency: str = Field(default="KRW")
    free_shipping_threshold: int = Field(default=50000, ge=0)
    shipping_fee: int = Field(default=3000, ge=0)
    gift_wrap_fee: int = Field(default=3000, ge=0)

    # Stock writes are compare-and-swap; this many tries before giving up.
    reservation_max_attempts: int = Field(default=3, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="STOREORDERS_", env_file=".env", extra="ignore"
    )

    def checkout_fees(self) -> CheckoutFees:
        return CheckoutFees(
            shipping_threshold=Money.of(self.free_shipping_threshold, self.currency),
            shipping_fee=Money.of(self.shipping_fee, self.currency),
            gift_wrap_fee=Money.of(self.gift_wrap_fee, self.currency),
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
