from models import ERROR, INFO, SUCCESS, Component


def test_customer_crud(ledger):
    cid = ledger.add_customer({"name": " Jens Hansen ", "email": "jens@example.dk", "phone": "12345678"}).data
    c = ledger.get_customer(cid)
    assert c.name == "Jens Hansen"
    assert c.address == ""

    assert ledger.update_customer(cid, {"address": "Nørregade 1"}).ok
    c = ledger.get_customer(cid)
    assert c.address == "Nørregade 1"
    assert c.email == "jens@example.dk"


def test_customer_name_required(ledger):
    assert not ledger.add_customer({"name": "", "email": "x@example.dk"}).ok
    assert ledger.customers == []
    cid = ledger.add_customer({"name": "Kim"}).data
    assert not ledger.update_customer(cid, {"name": " "}).ok
    assert ledger.get_customer(cid).name == "Kim"


def test_update_unknown_customer_is_silent(ledger):
    result = ledger.update_customer("cust_missing", {"name": "X"})
    assert not result.ok
    assert ledger.toasts == []


def test_delete_customer_clears_build_assignment(stocked):
    ledger, ids, _ = stocked
    cid = ledger.add_customer({"name": "Anna"}).data
    ledger.build_pc("Beast", "PC-1", [Component(ids["RAM"])], customer_id=cid)
    build_id = ledger.builds[0].id

    result = ledger.delete_customer(cid)

    assert result.ok
    assert result.blocking
    assert ledger.get_customer(cid) is None
    build = ledger.get_build(build_id)
    assert build is not None
    assert build.customer_id is None
    assert ledger.customer_for_pc_product(build.pc_product_id) is None


def test_delete_unknown_customer(ledger):
    result = ledger.delete_customer("cust_missing")
    assert not result.ok
    assert result.blocking
    assert result.severity == ERROR


def test_search_customers(ledger):
    a = ledger.add_customer({"name": "Anna", "email": "anna@shop.dk", "phone": "1111"}).data
    b = ledger.add_customer({"name": "Bo", "email": "bo@mail.dk", "phone": "2222"}).data
    assert [c.id for c in ledger.search_customers("SHOP")] == [a]
    assert [c.id for c in ledger.search_customers("2222")] == [b]
    assert [c.id for c in ledger.search_customers("")] == [a, b]


def test_toasts_append_and_remove(ledger):
    t1 = ledger.add_toast("hello", INFO)
    t2 = ledger.add_toast("done", SUCCESS)
    assert t2.id > t1.id
    assert [t.message for t in ledger.toasts] == ["hello", "done"]

    ledger.remove_toast(t1.id)
    assert [t.id for t in ledger.toasts] == [t2.id]
    ledger.remove_toast(12345)
    assert len(ledger.toasts) == 1


def test_settings_and_money(ledger):
    assert ledger.money_str(1234.4) == "1,234 DKK"
    ledger.set_setting("price_mode", "float")
    assert ledger.money_str(1234.4) == "1,234.40 DKK"
    ledger.set_setting("price_decimals", 0)
    assert ledger.money_str(1234.4) == "1,234 DKK"
    ledger.set_setting("price_decimals", None)
    assert ledger.money_str(1234.4) == "1,234.40 DKK"
    ledger.reset_settings()
    assert ledger.get_setting("price_mode") == "int"
