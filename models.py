from dataclasses import dataclass, field
from typing import List, Optional


CATEGORIES = ("CPU", "GPU", "RAM", "Motherboard", "Storage", "PSU", "Case", "Custom PC", "Other")
COMPONENT_CATEGORIES = ("CPU", "Motherboard", "RAM", "GPU", "Storage", "PSU", "Case")
CUSTOM_PC = "Custom PC"

IN_STOCK = "In Stock"
USED_IN_BUILD = "Used in Build"
SOLD = "Sold"
RETURNED = "Returned"
SERIAL_STATUSES = (IN_STOCK, USED_IN_BUILD, SOLD, RETURNED)

SUCCESS = "success"
ERROR = "error"
INFO = "info"


@dataclass
class Product:
    id: str
    name: str
    category: str
    price: float
    quantity: int = 0
    is_serialized: bool = False
    sku: str = ""


@dataclass
class SerializedItem:
    id: str
    product_id: str
    serial_number: str
    status: str = IN_STOCK


@dataclass
class Customer:
    id: str
    name: str
    email: str = ""
    phone: str = ""
    address: str = ""


@dataclass
class PCBuild:
    id: str
    pc_product_id: str
    name: str
    serial_number: str
    component_ids: List[str] = field(default_factory=list)
    customer_id: Optional[str] = None


@dataclass
class Component:
    """One line of a build request: a product, plus the serial to consume if it is serialized."""
    product_id: str
    serial_id: Optional[str] = None


@dataclass
class Toast:
    id: int
    message: str
    type: str = INFO


@dataclass
class Result:
    ok: bool
    message: str = ""
    severity: str = INFO
    data: Optional[str] = None
    blocking: bool = False


@dataclass
class Snapshot:
    products: List[Product] = field(default_factory=list)
    serials: List[SerializedItem] = field(default_factory=list)
    customers: List[Customer] = field(default_factory=list)
    builds: List[PCBuild] = field(default_factory=list)
