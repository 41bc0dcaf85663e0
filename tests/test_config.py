from __future__ import annotations

import logging
from decimal import Decimal
from pathlib import Path

import pytest

from blocksapi.config import DEFAULT_CATALOG_FILE, Settings, get_settings
from blocksapi.currency import format_amount, format_display_price, to_minor_units
from blocksapi.storage import load_catalog

ENV_VARS = (
    "BLOCKS_TAX_DISPLAY_SHOP",
    "BLOCKS_PRICES_INCLUDE_TAX",
    "BLOCKS_TAX_RATE",
    "BLOCKS_CURRENCY",
    "BLOCKS_CURRENCY_POS",
    "BLOCKS_PRICE_THOUSAND_SEP",
    "BLOCKS_PRICE_DECIMAL_SEP",
    "BLOCKS_PRICE_NUM_DECIMALS",
    "BLOCKS_CATALOG_FILE",
    "BLOCKS_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = get_settings()

    assert settings == Settings()
    assert settings.catalog_file == DEFAULT_CATALOG_FILE
    assert settings.display_prices_including_tax is False


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("BLOCKS_TAX_DISPLAY_SHOP", "INCL")
    monkeypatch.setenv("BLOCKS_PRICES_INCLUDE_TAX", "yes")
    monkeypatch.setenv("BLOCKS_TAX_RATE", "21")
    monkeypatch.setenv("BLOCKS_CURRENCY", "eur")
    monkeypatch.setenv("BLOCKS_CURRENCY_POS", "right_space")
    monkeypatch.setenv("BLOCKS_PRICE_THOUSAND_SEP", ".")
    monkeypatch.setenv("BLOCKS_PRICE_DECIMAL_SEP", ",")
    monkeypatch.setenv("BLOCKS_PRICE_NUM_DECIMALS", "3")
    monkeypatch.setenv("BLOCKS_CATALOG_FILE", "/tmp/catalog.json")
    monkeypatch.setenv("BLOCKS_LOG_LEVEL", "debug")

    settings = get_settings()

    assert settings.display_prices_including_tax is True
    assert settings.prices_include_tax is True
    assert settings.tax_rate == Decimal("21")
    assert settings.currency == "EUR"
    assert settings.currency_pos == "right_space"
    assert (settings.price_thousand_sep, settings.price_decimal_sep) == (".", ",")
    assert settings.price_num_decimals == 3
    assert settings.catalog_file == Path("/tmp/catalog.json")
    assert settings.log_level == "DEBUG"


def test_invalid_values_fall_back_to_defaults(monkeypatch, caplog):
    monkeypatch.setenv("BLOCKS_TAX_DISPLAY_SHOP", "both")
    monkeypatch.setenv("BLOCKS_TAX_RATE", "ten")
    monkeypatch.setenv("BLOCKS_PRICE_NUM_DECIMALS", "two")

    with caplog.at_level(logging.WARNING, logger="blocksapi.config"):
        settings = get_settings()

    assert settings.tax_display_shop == "excl"
    assert settings.tax_rate == Decimal("0")
    assert settings.price_num_decimals == 2
    assert "BLOCKS_TAX_RATE" in caplog.text


@pytest.mark.parametrize("raw, expected", [("TRUE", True), ("on", True), ("0", False), ("no", False)])
def test_boolean_spellings(monkeypatch, raw, expected):
    monkeypatch.setenv("BLOCKS_PRICES_INCLUDE_TAX", raw)
    assert get_settings().prices_include_tax is expected


def test_unrecognised_boolean_keeps_default_and_warns(monkeypatch, caplog):
    monkeypatch.setenv("BLOCKS_PRICES_INCLUDE_TAX", "maybe")

    with caplog.at_level(logging.WARNING, logger="blocksapi.config"):
        settings = get_settings()

    assert settings.prices_include_tax is False
    assert "BLOCKS_PRICES_INCLUDE_TAX" in caplog.text


def test_missing_catalog_file_yields_empty_platform(tmp_path, caplog):
    settings = Settings(catalog_file=tmp_path / "nope.json")

    with caplog.at_level(logging.WARNING, logger="blocksapi.storage"):
        platform = load_catalog(settings)

    assert platform.catalog.products == {}
    assert "not found" in caplog.text


@pytest.mark.parametrize(
    "value, decimals, expected",
    [("42", 2, "42.00"), ("18.005", 2, "18.01"), ("", 2, ""), (None, 2, ""), ("7.5", 0, "8")],
)
def test_format_amount(value, decimals, expected):
    assert format_amount(value, decimals) == expected


@pytest.mark.parametrize(
    "value, decimals, expected",
    [("10.5", 2, "1050"), ("109", 2, "10900"), ("0", 2, "0"), ("1.2345", 3, "1235"), ("", 2, "0")],
)
def test_to_minor_units(value, decimals, expected):
    assert to_minor_units(value, decimals) == expected


def test_format_display_price():
    settings = Settings(catalog_file=None, currency="EUR", currency_pos="right_space",
                        price_thousand_sep=".", price_decimal_sep=",")

    assert format_display_price("1234.5", settings) == "1.234,50 €"
    assert format_display_price("-3", Settings(catalog_file=None)) == "-$3.00"
