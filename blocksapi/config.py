# blocksapi/config.py
"""
Store settings read from the environment.

These mirror the handful of platform options the adapters need at
request time: how prices are displayed (tax inclusive or exclusive),
how the store currency is formatted, and where the reference catalog
is loaded from. ``.env`` is loaded once at import.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_FILE = Path(__file__).resolve().parent / "data" / "sample_catalog.json"

TAX_DISPLAY_MODES = ("incl", "excl")
CURRENCY_POSITIONS = ("left", "right", "left_space", "right_space")


@dataclass(frozen=True)
class Settings:
    tax_display_shop: str = "excl"
    prices_include_tax: bool = False
    tax_rate: Decimal = Decimal("0")
    currency: str = "USD"
    currency_pos: str = "left"
    price_thousand_sep: str = ","
    price_decimal_sep: str = "."
    price_num_decimals: int = 2
    catalog_file: Optional[Path] = DEFAULT_CATALOG_FILE
    log_level: str = "INFO"

    @property
    def display_prices_including_tax(self) -> bool:
        return self.tax_display_shop == "incl"


def _env_choice(name: str, choices, default: str) -> str:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    if raw not in choices:
        logger.warning("Ignoring %s=%r, expected one of %s", name, raw, ", ".join(choices))
        return default
    return raw


TRUE_VALUES = ("1", "true", "yes", "on")
FALSE_VALUES = ("0", "false", "no", "off")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    if raw in TRUE_VALUES:
        return True
    if raw in FALSE_VALUES:
        return False
    logger.warning("Ignoring %s=%r, expected one of %s", name, raw, ", ".join(TRUE_VALUES + FALSE_VALUES))
    return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return max(0, int(raw))
    except ValueError:
        logger.warning("Ignoring %s=%r, not an integer", name, raw)
        return default


def _env_decimal(name: str, default: Decimal) -> Decimal:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return Decimal(raw)
    except InvalidOperation:
        logger.warning("Ignoring %s=%r, not a number", name, raw)
        return default


def get_settings() -> Settings:
    """
    Build the settings object from ``BLOCKS_*`` environment variables.
    Missing or invalid values fall back to the defaults of ``Settings``.
    """
    catalog_raw = os.getenv("BLOCKS_CATALOG_FILE", "").strip()
    catalog_file: Optional[Path] = Path(catalog_raw) if catalog_raw else DEFAULT_CATALOG_FILE

    currency = (os.getenv("BLOCKS_CURRENCY", "").strip() or "USD").upper()

    return Settings(
        tax_display_shop=_env_choice("BLOCKS_TAX_DISPLAY_SHOP", TAX_DISPLAY_MODES, "excl"),
        prices_include_tax=_env_bool("BLOCKS_PRICES_INCLUDE_TAX", False),
        tax_rate=_env_decimal("BLOCKS_TAX_RATE", Decimal("0")),
        currency=currency,
        currency_pos=_env_choice("BLOCKS_CURRENCY_POS", CURRENCY_POSITIONS, "left"),
        price_thousand_sep=os.getenv("BLOCKS_PRICE_THOUSAND_SEP", ","),
        price_decimal_sep=os.getenv("BLOCKS_PRICE_DECIMAL_SEP", ".") or ".",
        price_num_decimals=_env_int("BLOCKS_PRICE_NUM_DECIMALS", 2),
        catalog_file=catalog_file,
        log_level=(os.getenv("BLOCKS_LOG_LEVEL", "").strip() or "INFO").upper(),
    )
