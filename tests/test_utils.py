from datetime import date

from utils import format_money, new_id, normalize_code, safe_float, safe_int, today_str


def test_format_money():
    assert format_money(1200) == "1,200"
    assert format_money(1200, mode="float", decimals=2) == "1,200.00"
    assert format_money(99.6, currency="DKK") == "100 DKK"
    assert format_money("n/a") == "n/a"


def test_safe_numbers():
    assert safe_int(" 7 ") == 7
    assert safe_int("x", None) is None
    assert safe_float("12,5") == 12.5
    assert safe_float("", None) is None


def test_new_id_and_codes():
    a, b = new_id("prod"), new_id("prod")
    assert a.startswith("prod_")
    assert a != b
    assert normalize_code("  ab-12 ") == "AB-12"
    assert normalize_code(None) == ""


def test_today_str():
    assert today_str(date(2026, 1, 2)) == "2026-01-02"
