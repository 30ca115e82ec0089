import pytest

from ledger import Ledger


def _add(ledger, **data):
    result = ledger.add_product(data)
    assert result.ok, result.message
    return result.data


@pytest.fixture
def ledger():
    return Ledger()


@pytest.fixture
def stocked(ledger):
    """A ledger with one product per component category; CPU and GPU track serials."""
    ids = {
        "CPU": _add(ledger, name="Ryzen 9", category="CPU", price=400, is_serialized=True, sku="cpu-1"),
        "Motherboard": _add(ledger, name="X670 Board", category="Motherboard", price=250, quantity=3, sku="mb-1"),
        "RAM": _add(ledger, name="32GB DDR5", category="RAM", price=100, quantity=2, sku="ram-1"),
        "GPU": _add(ledger, name="RTX 4080", category="GPU", price=1200, is_serialized=True, sku="gpu-1"),
        "Storage": _add(ledger, name="2TB NVMe", category="Storage", price=150, quantity=5, sku="ssd-1"),
        "PSU": _add(ledger, name="850W Gold", category="PSU", price=120, quantity=1, sku="psu-1"),
        "Case": _add(ledger, name="Mid Tower", category="Case", price=90, quantity=4, sku="case-1"),
    }
    serials = {
        "CPU1": ledger.add_serial_number(ids["CPU"], "CPU-SN-1").data,
        "CPU2": ledger.add_serial_number(ids["CPU"], "CPU-SN-2").data,
        "GPU1": ledger.add_serial_number(ids["GPU"], "GPU-SN-1").data,
    }
    ledger.toasts.clear()
    return ledger, ids, serials
