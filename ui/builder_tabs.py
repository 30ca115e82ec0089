from __future__ import annotations

import threading
import tkinter as tk
from tkinter import ttk
from typing import Dict, Optional

from ledger import LedgerError, prepare_components
from models import COMPONENT_CATEGORIES, ERROR, INFO
from naming import suggest_pc_name
from ui.common import ComponentSelector


class BuilderTabs(ttk.Frame):
    def __init__(self, parent, ledger, *, on_changed=None):
        super().__init__(parent)
        self.ledger = ledger
        self.on_changed = on_changed
        self._customer_ids: Dict[str, str] = {}
        self._name_result: Optional[str] = None
        self._name_thread: Optional[threading.Thread] = None

        left = ttk.LabelFrame(self, text="Choose components")
        left.pack(side="left", fill="both", expand=True, padx=8, pady=8)

        self.selectors: Dict[str, ComponentSelector] = {}
        for cat in COMPONENT_CATEGORIES:
            sel = ComponentSelector(left, ledger, cat, on_change=self._update_total)
            sel.pack(anchor="w", padx=4, pady=4)
            self.selectors[cat] = sel

        right = ttk.LabelFrame(self, text="Finished PC")
        right.pack(side="left", fill="y", padx=8, pady=8)

        self.var_name = tk.StringVar()
        self.var_serial = tk.StringVar()
        self.var_customer = tk.StringVar(value="")
        self.var_total = tk.StringVar(value="")

        ttk.Label(right, text="PC name").grid(row=0, column=0, sticky="w", padx=4, pady=4)
        ttk.Entry(right, textvariable=self.var_name, width=30).grid(row=0, column=1, sticky="w", padx=4, pady=4)
        self.btn_suggest = ttk.Button(right, text="Suggest", command=self.on_suggest_name)
        self.btn_suggest.grid(row=0, column=2, sticky="w", padx=4, pady=4)

        ttk.Label(right, text="New serial number").grid(row=1, column=0, sticky="w", padx=4, pady=4)
        ttk.Entry(right, textvariable=self.var_serial, width=30).grid(row=1, column=1, sticky="w", padx=4, pady=4)

        ttk.Label(right, text="Customer (optional)").grid(row=2, column=0, sticky="w", padx=4, pady=4)
        self.cb_customer = ttk.Combobox(right, textvariable=self.var_customer, state="readonly", width=28)
        self.cb_customer.grid(row=2, column=1, sticky="w", padx=4, pady=4)

        ttk.Separator(right).grid(row=3, column=0, columnspan=3, sticky="ew", pady=8)
        ttk.Label(right, text="Total price").grid(row=4, column=0, sticky="w", padx=4, pady=4)
        ttk.Label(right, textvariable=self.var_total, font=("", 14, "bold")).grid(row=4, column=1, sticky="w", padx=4, pady=4)

        ttk.Button(right, text="Complete build", command=self.on_build).grid(row=5, column=1, sticky="e", padx=4, pady=12)

        self.refresh()

    def _picked_product_ids(self):
        return [sel.get_product_id() for sel in self.selectors.values()]

    def _update_total(self):
        self.var_total.set(self.ledger.money_str(self.ledger.quote_price(self._picked_product_ids())))

    def _selected_customer_id(self) -> Optional[str]:
        return self._customer_ids.get(self.var_customer.get())

    def on_suggest_name(self):
        products = [self.ledger.get_product(pid) for pid in self._picked_product_ids() if pid]
        products = [p for p in products if p is not None]
        if not products:
            self.ledger.add_toast("Choose at least one component to get a name suggestion.", INFO)
            return
        if self._name_thread is not None:
            return

        self.btn_suggest.configure(state="disabled", text="...")
        self._name_result = None

        def worker():
            self._name_result = suggest_pc_name(products)

        self._name_thread = threading.Thread(target=worker, daemon=True)
        self._name_thread.start()
        self.after(200, self._poll_name)

    def _poll_name(self):
        if self._name_thread is not None and self._name_thread.is_alive():
            self.after(200, self._poll_name)
            return
        self._name_thread = None
        self.btn_suggest.configure(state="normal", text="Suggest")
        if self._name_result:
            self.var_name.set(self._name_result)
        else:
            self.ledger.add_toast("Could not generate a name.", ERROR)

    def on_build(self):
        name = self.var_name.get().strip()
        serial = self.var_serial.get().strip().upper()
        if not name or not serial:
            self.ledger.add_toast("PC name and serial number are required.", ERROR)
            return

        picks = {cat: (sel.get_product_id(), sel.get_serial_id()) for cat, sel in self.selectors.items()}
        try:
            components = prepare_components(self.ledger.snapshot, picks)
        except LedgerError as e:
            self.ledger.add_toast(str(e), ERROR)
            return

        result = self.ledger.build_pc(name, serial, components, self._selected_customer_id())
        if not result.ok:
            return

        self.var_name.set("")
        self.var_serial.set("")
        self.var_customer.set("")
        for sel in self.selectors.values():
            sel.reset()
        if callable(self.on_changed):
            self.on_changed()
        else:
            self.refresh()

    def refresh(self):
        for sel in self.selectors.values():
            sel.refresh()
        self._customer_ids = {f"{c.name} ({c.email})" if c.email else c.name: c.id for c in self.ledger.customers}
        labels = [""] + list(self._customer_ids)
        self.cb_customer["values"] = labels
        if self.var_customer.get() not in labels:
            self.var_customer.set("")
        self._update_total()
