import copy

import pytest

from ledger import ConflictError, InvalidStateError, NotFoundError, ValidationError, apply_build, prepare_components
from models import CUSTOM_PC, ERROR, IN_STOCK, USED_IN_BUILD, Component


def test_build_pc_mixed_components(stocked):
    ledger, ids, serials = stocked
    n_products = len(ledger.products)
    n_serials = len(ledger.serials)
    components = [
        Component(ids["CPU"], serials["CPU1"]),
        Component(ids["RAM"]),
        Component(ids["GPU"], serials["GPU1"]),
        Component(ids["PSU"]),
    ]

    result = ledger.build_pc("Nova Prime", "pc-2024-0042", components)

    assert result.ok
    assert len(ledger.products) == n_products + 1
    assert len(ledger.serials) == n_serials + 1
    assert len(ledger.builds) == 1

    build = ledger.builds[0]
    assert build.id == result.data
    assert build.component_ids == [serials["CPU1"], ids["RAM"], serials["GPU1"], ids["PSU"]]
    assert build.customer_id is None

    pc = ledger.get_product(build.pc_product_id)
    assert pc.category == CUSTOM_PC
    assert pc.is_serialized
    assert pc.quantity == 1
    assert pc.price == 400 + 100 + 1200 + 120
    assert pc.sku == "CUSTOM-PC-0042"

    pc_serials = ledger.list_serials(pc.id)
    assert len(pc_serials) == 1
    assert pc_serials[0].serial_number == "PC-2024-0042"
    assert pc_serials[0].status == IN_STOCK

    assert ledger.get_serial(serials["CPU1"]).status == USED_IN_BUILD
    assert ledger.get_serial(serials["GPU1"]).status == USED_IN_BUILD
    assert ledger.get_serial(serials["CPU2"]).status == IN_STOCK
    assert ledger.get_product(ids["RAM"]).quantity == 1
    assert ledger.get_product(ids["PSU"]).quantity == 0
    # serial driven quantities follow serial add/remove only
    assert ledger.get_product(ids["CPU"]).quantity == 2


def test_build_price_uses_prices_at_build_time(stocked):
    ledger, ids, _ = stocked
    ledger.build_pc("First", "PC-1", [Component(ids["RAM"])])
    ledger.update_product(ids["RAM"], {"price": 300})
    ledger.build_pc("Second", "PC-2", [Component(ids["RAM"])])

    prices = [ledger.get_product(b.pc_product_id).price for b in ledger.builds]
    assert prices == [100, 300]


def test_build_with_customer(stocked):
    ledger, ids, _ = stocked
    cid = ledger.add_customer({"name": "Anna"}).data
    ledger.build_pc("Beast", "PC-1", [Component(ids["Case"])], customer_id=cid)

    build = ledger.builds[0]
    assert build.customer_id == cid
    assert ledger.customer_for_pc_product(build.pc_product_id).name == "Anna"


@pytest.mark.parametrize("name,serial", [("", "PC-1"), ("Beast", ""), ("   ", "  ")])
def test_build_requires_name_and_serial(stocked, name, serial):
    ledger, ids, _ = stocked
    before = copy.deepcopy(ledger.snapshot)
    result = ledger.build_pc(name, serial, [Component(ids["RAM"])])
    assert not result.ok
    assert ledger.snapshot == before


def test_rejected_build_leaves_state_unchanged(stocked):
    ledger, ids, serials = stocked
    before = copy.deepcopy(ledger.snapshot)

    # CPU serial is consumed first, then the third RAM request runs out of stock
    result = ledger.build_pc("Beast", "PC-1", [
        Component(ids["CPU"], serials["CPU1"]),
        Component(ids["RAM"]),
        Component(ids["RAM"]),
        Component(ids["RAM"]),
    ])

    assert not result.ok
    assert ledger.toasts[-1].type == ERROR
    assert ledger.snapshot == before


def test_build_rejects_duplicate_pc_serial(stocked):
    ledger, ids, _ = stocked
    with pytest.raises(ConflictError):
        apply_build(ledger.snapshot, "Beast", "cpu-sn-1", [Component(ids["RAM"])])


def test_build_rejects_serial_of_earlier_build_after_its_stock_serial_is_deleted(stocked):
    ledger, ids, _ = stocked
    assert ledger.build_pc("A", "PC-1", [Component(ids["RAM"])]).ok
    pc_serial = ledger.list_serials(ledger.builds[0].pc_product_id)[0]
    assert ledger.delete_serial_number(pc_serial.id).ok
    before = copy.deepcopy(ledger.snapshot)

    result = ledger.build_pc("B", "pc-1", [Component(ids["Case"])])

    assert not result.ok
    assert "already exists" in result.message
    assert ledger.snapshot == before
    with pytest.raises(ConflictError):
        apply_build(ledger.snapshot, "B", "PC-1", [Component(ids["Case"])])


def test_build_rejects_used_serial(stocked):
    ledger, ids, serials = stocked
    assert ledger.build_pc("A", "PC-1", [Component(ids["CPU"], serials["CPU1"])]).ok
    with pytest.raises(InvalidStateError):
        apply_build(ledger.snapshot, "B", "PC-2", [Component(ids["CPU"], serials["CPU1"])])


def test_build_rejects_same_serial_twice(stocked):
    ledger, ids, serials = stocked
    with pytest.raises(InvalidStateError):
        apply_build(ledger.snapshot, "A", "PC-1", [
            Component(ids["CPU"], serials["CPU1"]),
            Component(ids["CPU"], serials["CPU1"]),
        ])


def test_build_rejects_serial_of_other_product(stocked):
    ledger, ids, serials = stocked
    with pytest.raises(InvalidStateError):
        apply_build(ledger.snapshot, "A", "PC-1", [Component(ids["CPU"], serials["GPU1"])])


def test_build_rejects_serialized_product_without_serial(stocked):
    ledger, ids, _ = stocked
    with pytest.raises(ValidationError):
        apply_build(ledger.snapshot, "A", "PC-1", [Component(ids["GPU"])])


def test_build_rejects_unknown_references(stocked):
    ledger, ids, _ = stocked
    with pytest.raises(NotFoundError):
        apply_build(ledger.snapshot, "A", "PC-1", [Component("prod_missing")])
    with pytest.raises(NotFoundError):
        apply_build(ledger.snapshot, "A", "PC-1", [Component(ids["CPU"], "ser_missing")])
    with pytest.raises(NotFoundError):
        apply_build(ledger.snapshot, "A", "PC-1", [Component(ids["RAM"])], customer_id="cust_missing")


def test_apply_build_does_not_touch_input(stocked):
    ledger, ids, serials = stocked
    before = copy.deepcopy(ledger.snapshot)
    snap, build = apply_build(ledger.snapshot, "A", "PC-1", [Component(ids["CPU"], serials["CPU1"]), Component(ids["RAM"])])
    assert ledger.snapshot == before
    assert snap.builds[-1] == build


def test_prepare_components_requires_every_category(stocked):
    ledger, ids, serials = stocked
    picks = {cat: (pid, None) for cat, pid in ids.items()}
    picks["CPU"] = (ids["CPU"], serials["CPU2"])
    picks["GPU"] = (ids["GPU"], serials["GPU1"])

    components = prepare_components(ledger.snapshot, picks)

    assert [c.product_id for c in components] == [
        ids["CPU"], ids["Motherboard"], ids["RAM"], ids["GPU"], ids["Storage"], ids["PSU"], ids["Case"],
    ]
    assert components[0].serial_id == serials["CPU2"]
    assert components[1].serial_id is None

    del picks["Case"]
    with pytest.raises(ValidationError, match="Case"):
        prepare_components(ledger.snapshot, picks)


def test_prepare_components_requires_serial_for_serialized(stocked):
    ledger, ids, _ = stocked
    picks = {cat: (pid, None) for cat, pid in ids.items()}
    with pytest.raises(ValidationError, match="Ryzen 9"):
        prepare_components(ledger.snapshot, picks)


def test_full_build_from_picks(stocked):
    ledger, ids, serials = stocked
    picks = {cat: (pid, None) for cat, pid in ids.items()}
    picks["CPU"] = (ids["CPU"], serials["CPU2"])
    picks["GPU"] = (ids["GPU"], serials["GPU1"])

    result = ledger.build_pc("Cerberus X", "SN-FULL-7777", prepare_components(ledger.snapshot, picks))

    assert result.ok
    build = ledger.get_build(result.data)
    assert len(build.component_ids) == 7
    assert ledger.get_product(build.pc_product_id).price == 400 + 250 + 100 + 1200 + 150 + 120 + 90
