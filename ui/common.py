from __future__ import annotations

import tkinter as tk
from tkinter import ttk, messagebox
from typing import Callable, Dict, List, Optional

from models import ERROR, IN_STOCK, SUCCESS, Result

TOAST_MS = 3000
TOAST_COLORS = {SUCCESS: "#1e7d32", ERROR: "#b3261e"}


def confirm_delete(parent, ledger, what: str, title: str = "Confirm removal") -> bool:
    if not ledger.get_setting("confirm_deletes", True):
        return True
    return messagebox.askyesno(
        title,
        f"Remove {what}?\n\nThis cannot be undone.",
        parent=parent
    )


def show_result(parent, result: Result) -> None:
    """Blocking results are shown as a dialog; everything else arrives through the toast bar."""
    if not result.blocking:
        return
    if result.ok:
        messagebox.showinfo("Done", result.message, parent=parent)
    else:
        messagebox.showerror("Problem", result.message, parent=parent)


class ToastBar(ttk.Frame):
    """
    Shows the ledger's toasts at the bottom of the window and removes each one
    after TOAST_MS.
    """
    def __init__(self, parent, ledger):
        super().__init__(parent)
        self.ledger = ledger
        self._labels: Dict[int, tk.Label] = {}
        self.after(200, self._tick)

    def _tick(self):
        for toast in list(self.ledger.toasts):
            if toast.id in self._labels:
                continue
            lbl = tk.Label(
                self,
                text=toast.message,
                anchor="w",
                fg="white",
                bg=TOAST_COLORS.get(toast.type, "#37474f"),
                padx=10,
                pady=4,
            )
            lbl.pack(fill="x", padx=8, pady=1)
            self._labels[toast.id] = lbl
            self.after(TOAST_MS, lambda tid=toast.id: self._expire(tid))
        self.after(200, self._tick)

    def _expire(self, toast_id: int):
        self.ledger.remove_toast(toast_id)
        lbl = self._labels.pop(toast_id, None)
        if lbl is not None:
            lbl.destroy()


class ComponentSelector(ttk.Frame):
    """
    Two-step picker for one component slot: product in the category, then
    (for serialized products) one of its in-stock serial numbers.
    """
    def __init__(self, parent, ledger, category: str, *, on_change: Optional[Callable[[], None]] = None):
        super().__init__(parent)
        self.ledger = ledger
        self.category = category
        self.on_change = on_change

        self.var_product = tk.StringVar(value="")
        self.var_serial = tk.StringVar(value="")
        self._product_ids: Dict[str, str] = {}
        self._serial_ids: Dict[str, str] = {}

        ttk.Label(self, text=category, width=12).grid(row=0, column=0, sticky="w", padx=4, pady=2)
        self.cb_product = ttk.Combobox(self, textvariable=self.var_product, state="readonly", width=44)
        self.cb_product.grid(row=0, column=1, sticky="w", padx=4, pady=2)

        ttk.Label(self, text="Serial").grid(row=0, column=2, sticky="w", padx=4, pady=2)
        self.cb_serial = ttk.Combobox(self, textvariable=self.var_serial, state="disabled", width=22)
        self.cb_serial.grid(row=0, column=3, sticky="w", padx=4, pady=2)

        self.cb_product.bind("<<ComboboxSelected>>", lambda e: self._on_product())
        self.cb_serial.bind("<<ComboboxSelected>>", lambda e: self._notify())
        self.refresh()

    def _notify(self):
        if callable(self.on_change):
            self.on_change()

    def _on_product(self):
        self._refresh_serials()
        self._notify()

    def refresh(self):
        self._product_ids = dict(self.ledger.product_choices(self.category))
        labels = [""] + list(self._product_ids)
        self.cb_product["values"] = labels
        if self.var_product.get() not in labels:
            self.var_product.set("")
        self._refresh_serials()

    def _refresh_serials(self):
        product = self.ledger.get_product(self.get_product_id()) if self.get_product_id() else None
        if product is None or not product.is_serialized:
            self._serial_ids = {}
            self.cb_serial["values"] = []
            self.var_serial.set("")
            self.cb_serial.configure(state="disabled")
            return
        self._serial_ids = {s.serial_number: s.id for s in self.ledger.list_serials(product.id, status=IN_STOCK)}
        self.cb_serial["values"] = list(self._serial_ids)
        if self.var_serial.get() not in self._serial_ids:
            self.var_serial.set("")
        self.cb_serial.configure(state="readonly")

    def reset(self):
        self.var_product.set("")
        self._refresh_serials()

    def get_product_id(self) -> Optional[str]:
        return self._product_ids.get(self.var_product.get())

    def get_serial_id(self) -> Optional[str]:
        return self._serial_ids.get(self.var_serial.get())


def fill_tree(tree: ttk.Treeview, rows: List[tuple], ids: List[str]) -> None:
    tree.delete(*tree.get_children())
    for iid, values in zip(ids, rows):
        tree.insert("", "end", iid=iid, values=values)


def selected_id(tree: ttk.Treeview) -> Optional[str]:
    sel = tree.selection()
    return str(sel[0]) if sel else None
