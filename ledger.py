from __future__ import annotations

import itertools
import logging
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from models import (
    CATEGORIES,
    COMPONENT_CATEGORIES,
    CUSTOM_PC,
    ERROR,
    INFO,
    IN_STOCK,
    SUCCESS,
    USED_IN_BUILD,
    Component,
    Customer,
    PCBuild,
    Product,
    Result,
    SerializedItem,
    Snapshot,
    Toast,
)
from utils import format_money, new_id, normalize_code

logger = logging.getLogger(__name__)

PRODUCT_FIELDS = ("name", "category", "price", "quantity", "is_serialized", "sku")
CUSTOMER_FIELDS = ("name", "email", "phone", "address")


class LedgerError(ValueError):
    """An operation was rejected; the message is shown to the user as is."""


class NotFoundError(LedgerError):
    pass


class ConflictError(LedgerError):
    pass


class InvalidStateError(LedgerError):
    pass


class ValidationError(LedgerError):
    pass


def _default_settings() -> Dict[str, Any]:
    return {
        "theme": "",                 # ttk theme name
        "price_mode": "int",         # "int" | "float"
        "price_decimals": 2,         # used when price_mode == "float"
        "currency": "DKK",
        "low_stock_threshold": 5,
        "confirm_deletes": True,
    }


# -------------------------
# Snapshot helpers
# -------------------------
def _find(rows: Iterable[Any], row_id: Optional[str]) -> Optional[Any]:
    for r in rows:
        if r.id == row_id:
            return r
    return None


def _serial_taken(serials: Iterable[SerializedItem], serial_number: str, exclude_id: Optional[str] = None) -> bool:
    wanted = serial_number.lower()
    return any(s.serial_number.lower() == wanted and s.id != exclude_id for s in serials)


def _strip_components(builds: Iterable[PCBuild], ids: Iterable[str]) -> List[PCBuild]:
    drop = set(ids)
    return [replace(b, component_ids=[c for c in b.component_ids if c not in drop]) for b in builds]


def _clean_product_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    out = {k: data[k] for k in PRODUCT_FIELDS if k in data}
    if "name" in out:
        out["name"] = str(out["name"] or "").strip()
        if not out["name"]:
            raise ValidationError("Product name is required")
    if "category" in out and out["category"] not in CATEGORIES:
        raise ValidationError(f"Unknown category: {out['category']}")
    if "price" in out:
        try:
            out["price"] = float(out["price"] or 0)
        except (TypeError, ValueError):
            raise ValidationError("Price must be a number")
        if out["price"] < 0:
            raise ValidationError("Price cannot be negative")
    if "quantity" in out:
        try:
            out["quantity"] = int(out["quantity"] or 0)
        except (TypeError, ValueError):
            raise ValidationError("Quantity must be a whole number")
        if out["quantity"] < 0:
            raise ValidationError("Quantity cannot be negative")
    if "is_serialized" in out:
        out["is_serialized"] = bool(out["is_serialized"])
    if "sku" in out:
        out["sku"] = normalize_code(out["sku"])
    return out


def _clean_customer_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    out = {k: str(data.get(k) or "").strip() for k in CUSTOMER_FIELDS if k in data}
    if "name" in out and not out["name"]:
        raise ValidationError("Customer name is required")
    return out


def prepare_components(
    snap: Snapshot,
    picks: Dict[str, Tuple[Optional[str], Optional[str]]],
    required: Sequence[str] = COMPONENT_CATEGORIES,
) -> List[Component]:
    """
    Turn the builder's per-category picks ({category: (product_id, serial_id)})
    into an ordered component list. Every required category needs a product,
    and serialized products need a serial.
    """
    out: List[Component] = []
    for category in required:
        product_id, serial_id = picks.get(category) or (None, None)
        if not product_id:
            raise ValidationError(f"Please choose a {category}.")
        product = _find(snap.products, product_id)
        if product is None:
            continue
        if product.is_serialized:
            if not serial_id:
                raise ValidationError(f'Please choose a serial number for "{product.name}".')
            out.append(Component(product_id=product_id, serial_id=serial_id))
        else:
            out.append(Component(product_id=product_id))
    return out


def apply_build(
    snap: Snapshot,
    name: str,
    serial_number: str,
    components: Sequence[Component],
    customer_id: Optional[str] = None,
) -> Tuple[Snapshot, PCBuild]:
    """
    Assemble a PC out of `components` and return the resulting snapshot together
    with the new build record. `snap` is never modified; on any problem a
    LedgerError is raised and nothing has changed.
    """
    name = (name or "").strip()
    serial_number = normalize_code(serial_number)
    if not name:
        raise ValidationError("PC name is required")
    if not serial_number:
        raise ValidationError("PC serial number is required")
    if not components:
        raise ValidationError("Select at least one component")
    # a build keeps its serial even after the PC's stock serial is deleted
    if _serial_taken(snap.serials, serial_number) or any(
            b.serial_number.lower() == serial_number.lower() for b in snap.builds):
        raise ConflictError(f'Serial number "{serial_number}" already exists')
    if customer_id and _find(snap.customers, customer_id) is None:
        raise NotFoundError("Customer not found")

    products = list(snap.products)
    serials = list(snap.serials)
    index_p = {p.id: i for i, p in enumerate(products)}
    index_s = {s.id: i for i, s in enumerate(serials)}

    component_ids: List[str] = []
    total = 0.0
    for comp in components:
        if comp.product_id not in index_p:
            raise NotFoundError("Component product not found")
        product = products[index_p[comp.product_id]]
        total += product.price

        if comp.serial_id:
            if comp.serial_id not in index_s:
                raise NotFoundError(f'Serial number for "{product.name}" not found')
            serial = serials[index_s[comp.serial_id]]
            if serial.product_id != product.id:
                raise InvalidStateError(f'Serial "{serial.serial_number}" does not belong to "{product.name}"')
            if serial.status != IN_STOCK:
                raise InvalidStateError(f'Serial "{serial.serial_number}" is not in stock ({serial.status})')
            serials[index_s[serial.id]] = replace(serial, status=USED_IN_BUILD)
            component_ids.append(serial.id)
        else:
            if product.is_serialized:
                raise ValidationError(f'Choose a serial number for "{product.name}"')
            if product.quantity < 1:
                raise ConflictError(f'"{product.name}" is out of stock')
            products[index_p[product.id]] = replace(product, quantity=product.quantity - 1)
            component_ids.append(product.id)

    pc = Product(
        id=new_id("prod"),
        name=name,
        category=CUSTOM_PC,
        price=total,
        quantity=1,
        is_serialized=True,
        sku=f"CUSTOM-PC-{serial_number[-4:]}",
    )
    products.append(pc)
    serials.append(SerializedItem(id=new_id("ser"), product_id=pc.id, serial_number=serial_number, status=IN_STOCK))

    build = PCBuild(
        id=new_id("build"),
        pc_product_id=pc.id,
        name=name,
        serial_number=serial_number,
        component_ids=component_ids,
        customer_id=customer_id or None,
    )
    builds = list(snap.builds) + [build]

    return Snapshot(products=products, serials=serials, customers=list(snap.customers), builds=builds), build


class Ledger:
    """
    In-memory owner of products, serial numbers, customers and PC builds.

    Every public mutation returns a Result and never raises. Non-blocking
    results are also appended to `toasts`; blocking ones (deletions) are left
    for the caller to show as a dialog.
    """

    def __init__(self, snapshot: Optional[Snapshot] = None, settings: Optional[Dict[str, Any]] = None):
        self.snapshot = snapshot or Snapshot()
        self.settings: Dict[str, Any] = _default_settings()
        self.settings.update(settings or {})
        self.toasts: List[Toast] = []
        self._toast_ids = itertools.count(1)

    # -------------------------
    # Internal
    # -------------------------
    def _commit(self, **changes: Any) -> None:
        self.snapshot = replace(self.snapshot, **changes)

    def _ok(self, message: str, data: Optional[str] = None, blocking: bool = False) -> Result:
        logger.info(message)
        if not blocking:
            self.add_toast(message, SUCCESS)
        return Result(ok=True, message=message, severity=SUCCESS, data=data, blocking=blocking)

    def _fail(self, err: LedgerError, blocking: bool = False) -> Result:
        message = str(err)
        logger.warning("rejected: %s", message)
        if not blocking:
            self.add_toast(message, ERROR)
        return Result(ok=False, message=message, severity=ERROR, blocking=blocking)

    @staticmethod
    def _ignored(message: str) -> Result:
        logger.debug("ignored: %s", message)
        return Result(ok=False, message=message, severity=INFO)

    # -------------------------
    # Collections
    # -------------------------
    @property
    def products(self) -> List[Product]:
        return self.snapshot.products

    @property
    def serials(self) -> List[SerializedItem]:
        return self.snapshot.serials

    @property
    def customers(self) -> List[Customer]:
        return self.snapshot.customers

    @property
    def builds(self) -> List[PCBuild]:
        return self.snapshot.builds

    # -------------------------
    # Settings
    # -------------------------
    def get_setting(self, key: str, default: Any = None) -> Any:
        return self.settings.get(key, default)

    def set_setting(self, key: str, value: Any) -> None:
        self.settings[key] = value

    def reset_settings(self) -> None:
        self.settings = _default_settings()

    def money_str(self, value: float) -> str:
        mode = self.get_setting("price_mode", "int")
        decimals = self.get_setting("price_decimals", 2)
        if decimals is None:
            decimals = 2
        return format_money(value, mode=mode, decimals=int(decimals), currency=self.get_setting("currency", ""))

    # -------------------------
    # Toasts
    # -------------------------
    def add_toast(self, message: str, type: str = INFO) -> Toast:
        toast = Toast(id=next(self._toast_ids), message=message, type=type)
        self.toasts.append(toast)
        return toast

    def remove_toast(self, toast_id: int) -> None:
        self.toasts = [t for t in self.toasts if t.id != toast_id]

    # -------------------------
    # Read helpers
    # -------------------------
    def get_product(self, product_id: str) -> Optional[Product]:
        return _find(self.products, product_id)

    def get_serial(self, serial_id: str) -> Optional[SerializedItem]:
        return _find(self.serials, serial_id)

    def get_customer(self, customer_id: str) -> Optional[Customer]:
        return _find(self.customers, customer_id)

    def get_build(self, build_id: str) -> Optional[PCBuild]:
        return _find(self.builds, build_id)

    def list_serials(self, product_id: str, status: Optional[str] = None) -> List[SerializedItem]:
        return [s for s in self.serials
                if s.product_id == product_id and (status is None or s.status == status)]

    def search_products(self, term: str = "") -> List[Product]:
        t = (term or "").strip().lower()
        if not t:
            return list(self.products)
        return [p for p in self.products
                if t in p.name.lower() or t in p.sku.lower() or t in p.category.lower()]

    def search_customers(self, term: str = "") -> List[Customer]:
        t = (term or "").strip().lower()
        if not t:
            return list(self.customers)
        return [c for c in self.customers
                if t in c.name.lower() or t in c.email.lower() or t in c.phone.lower()]

    def available_products(self, category: str) -> List[Product]:
        return [p for p in self.products if p.category == category and p.quantity > 0]

    def product_choices(self, category: str) -> List[Tuple[str, str]]:
        """(label, product_id) pairs for the in-stock products of a category; labels are unique."""
        out: List[Tuple[str, str]] = []
        seen = set()
        for p in self.available_products(category):
            unit = "available" if p.is_serialized else "in stock"
            sku = f" [{p.sku}]" if p.sku else ""
            label = f"{p.name}{sku} ({p.quantity} {unit})"
            if label in seen:
                label = f"{label} {p.id}"
            seen.add(label)
            out.append((label, p.id))
        return out

    def customer_for_pc_product(self, pc_product_id: str) -> Optional[Customer]:
        for b in self.builds:
            if b.pc_product_id == pc_product_id:
                return self.get_customer(b.customer_id) if b.customer_id else None
        return None

    def quote_price(self, product_ids: Iterable[Optional[str]]) -> float:
        total = 0.0
        for pid in product_ids:
            p = self.get_product(pid) if pid else None
            if p is not None:
                total += p.price
        return total

    def dashboard_stats(self) -> Dict[str, int]:
        threshold = int(self.get_setting("low_stock_threshold", 5) or 0)
        return {
            "total_products": len(self.products),
            "total_items": sum(p.quantity for p in self.products),
            "low_stock": sum(1 for p in self.products if 0 < p.quantity <= threshold),
            "out_of_stock": sum(1 for p in self.products if p.quantity == 0),
        }

    def stock_by_category(self) -> Dict[str, int]:
        out: Dict[str, int] = {}
        for p in self.products:
            out[p.category] = out.get(p.category, 0) + p.quantity
        return out

    # -------------------------
    # Products
    # -------------------------
    def add_product(self, data: Dict[str, Any]) -> Result:
        try:
            fields = _clean_product_fields(data)
            if "name" not in fields:
                raise ValidationError("Product name is required")
            fields.setdefault("category", "Other")
            fields.setdefault("price", 0.0)
            if fields.get("is_serialized"):
                fields["quantity"] = 0
        except LedgerError as e:
            return self._fail(e)

        product = Product(id=new_id("prod"), **fields)
        self._commit(products=self.products + [product])
        return self._ok(f'Product "{product.name}" added.', data=product.id)

    def update_product(self, product_id: str, data: Dict[str, Any]) -> Result:
        current = self.get_product(product_id)
        if current is None:
            return self._ignored("Product not found")
        try:
            fields = _clean_product_fields(data)
        except LedgerError as e:
            return self._fail(e)

        if current.is_serialized and fields.get("is_serialized", True):
            fields.pop("quantity", None)
        updated = replace(current, **fields)
        if updated.is_serialized and not current.is_serialized:
            updated.quantity = 0

        self._commit(products=[updated if p.id == product_id else p for p in self.products])
        return self._ok(f'Product "{updated.name}" updated.', data=product_id)

    def delete_product(self, product_id: str) -> Result:
        product = self.get_product(product_id)
        if product is None:
            return self._fail(NotFoundError("The product could not be found. Removal failed."), blocking=True)

        serial_ids = [s.id for s in self.serials if s.product_id == product_id]
        self._commit(
            products=[p for p in self.products if p.id != product_id],
            serials=[s for s in self.serials if s.product_id != product_id],
            builds=_strip_components(self.builds, [product_id] + serial_ids),
        )
        return self._ok(f'Product "{product.name}" has been removed.', data=product_id, blocking=True)

    # -------------------------
    # Serial numbers
    # -------------------------
    def add_serial_number(self, product_id: str, serial_number: str) -> Result:
        serial_number = normalize_code(serial_number)
        product = self.get_product(product_id)
        try:
            if product is None or not product.is_serialized:
                raise InvalidStateError("Cannot add a serial number to this product.")
            if not serial_number:
                raise ValidationError("Serial number is required")
            if _serial_taken(self.serials, serial_number):
                raise ConflictError("This serial number already exists.")
        except LedgerError as e:
            return self._fail(e)

        serial = SerializedItem(id=new_id("ser"), product_id=product_id, serial_number=serial_number, status=IN_STOCK)
        self._commit(
            serials=self.serials + [serial],
            products=[replace(p, quantity=p.quantity + 1) if p.id == product_id else p for p in self.products],
        )
        return self._ok(f'Serial number added to "{product.name}".', data=serial.id)

    def update_serial_number(self, serial_id: str, new_serial_number: str) -> Result:
        new_serial_number = normalize_code(new_serial_number)
        serial = self.get_serial(serial_id)
        try:
            if serial is None:
                raise NotFoundError("Serial number not found.")
            if serial.status != IN_STOCK:
                raise InvalidStateError(f"Only serial numbers with status '{IN_STOCK}' can be edited.")
            if not new_serial_number:
                raise ValidationError("Serial number is required")
            if _serial_taken(self.serials, new_serial_number, exclude_id=serial_id):
                raise ConflictError("This serial number already exists.")
        except LedgerError as e:
            return self._fail(e)

        self._commit(serials=[replace(s, serial_number=new_serial_number) if s.id == serial_id else s
                              for s in self.serials])
        return self._ok(f'Serial number updated to "{new_serial_number}".', data=serial_id)

    def delete_serial_number(self, serial_id: str) -> Result:
        serial = self.get_serial(serial_id)
        if serial is None:
            return self._fail(NotFoundError("The serial number could not be found. Removal failed."), blocking=True)

        self._commit(
            serials=[s for s in self.serials if s.id != serial_id],
            products=[replace(p, quantity=max(0, p.quantity - 1)) if p.id == serial.product_id else p
                      for p in self.products],
            builds=_strip_components(self.builds, [serial_id]),
        )
        return self._ok(f'Serial number "{serial.serial_number}" has been removed.', data=serial_id, blocking=True)

    # -------------------------
    # Builds
    # -------------------------
    def build_pc(
        self,
        name: str,
        serial_number: str,
        components: Sequence[Component],
        customer_id: Optional[str] = None,
    ) -> Result:
        try:
            snap, build = apply_build(self.snapshot, name, serial_number, components, customer_id)
        except LedgerError as e:
            return self._fail(e)

        self.snapshot = snap
        return self._ok(f'PC "{build.name}" built with serial number {build.serial_number}.', data=build.id)

    # -------------------------
    # Customers
    # -------------------------
    def add_customer(self, data: Dict[str, Any]) -> Result:
        try:
            fields = _clean_customer_fields(data)
            if "name" not in fields:
                raise ValidationError("Customer name is required")
        except LedgerError as e:
            return self._fail(e)

        customer = Customer(id=new_id("cust"), **fields)
        self._commit(customers=self.customers + [customer])
        return self._ok(f'Customer "{customer.name}" added.', data=customer.id)

    def update_customer(self, customer_id: str, data: Dict[str, Any]) -> Result:
        current = self.get_customer(customer_id)
        if current is None:
            return self._ignored("Customer not found")
        try:
            fields = _clean_customer_fields(data)
        except LedgerError as e:
            return self._fail(e)

        updated = replace(current, **fields)
        self._commit(customers=[updated if c.id == customer_id else c for c in self.customers])
        return self._ok(f'Customer "{updated.name}" updated.', data=customer_id)

    def delete_customer(self, customer_id: str) -> Result:
        customer = self.get_customer(customer_id)
        if customer is None:
            return self._fail(NotFoundError("The customer could not be found. Removal failed."), blocking=True)

        self._commit(
            customers=[c for c in self.customers if c.id != customer_id],
            builds=[replace(b, customer_id=None) if b.customer_id == customer_id else b for b in self.builds],
        )
        return self._ok(f'Customer "{customer.name}" has been removed.', data=customer_id, blocking=True)
