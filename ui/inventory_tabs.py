from __future__ import annotations

import tkinter as tk
from tkinter import ttk, messagebox
from typing import Optional

import matplotlib
matplotlib.use("TkAgg")
from matplotlib.backends.backend_tkagg import FigureCanvasTkAgg
from matplotlib.figure import Figure

from models import CATEGORIES, CUSTOM_PC, IN_STOCK
from utils import safe_float, safe_int
from ui.common import confirm_delete, fill_tree, selected_id, show_result


def calc_stock_value(ledger) -> float:
    """Stock value: price * quantity over all products."""
    return sum(p.price * p.quantity for p in ledger.products)


class InventoryTabs(ttk.Frame):
    def __init__(self, parent, ledger, *, on_changed=None):
        super().__init__(parent)
        self.ledger = ledger
        self.on_changed = on_changed

        # --- Dashboard stats ---
        style = ttk.Style()
        style.configure("StatCaption.TLabel", font=("", 10))
        style.configure("StatValue.TLabel", font=("", 16, "bold"))

        stats = ttk.LabelFrame(self, text="Overview")
        stats.pack(fill="x", padx=8, pady=(8, 6))

        self.stat_vars = {}
        for key, caption in [
            ("total_products", "Total products"),
            ("total_items", "Items in stock"),
            ("low_stock", "Low stock"),
            ("out_of_stock", "Out of stock"),
            ("stock_value", "Stock value"),
        ]:
            box = ttk.Frame(stats)
            box.pack(side="left", padx=14, pady=6)
            ttk.Label(box, text=caption, style="StatCaption.TLabel").pack(anchor="w")
            var = tk.StringVar(value="")
            ttk.Label(box, textvariable=var, style="StatValue.TLabel").pack(anchor="w")
            self.stat_vars[key] = var
        ttk.Button(stats, text="Refresh", command=self.refresh_all).pack(side="right", padx=10, pady=6)

        nb = ttk.Notebook(self)
        nb.pack(fill="both", expand=True)

        self.tab_products = ProductFrame(nb, ledger, tabs=self)
        self.tab_chart = StockChartFrame(nb, ledger)

        nb.add(self.tab_products, text="Products")
        nb.add(self.tab_chart, text="Stock by category")

        self.nb = nb
        self.refresh_all()

    def changed(self):
        # inventory changes affect the builder and customer views too
        if callable(self.on_changed):
            self.on_changed()
        else:
            self.refresh_all()

    def refresh_all(self):
        self.tab_products.refresh()
        self.tab_chart.refresh()
        for key, value in self.ledger.dashboard_stats().items():
            self.stat_vars[key].set(str(value))
        self.stat_vars["stock_value"].set(self.ledger.money_str(calc_stock_value(self.ledger)))


class ProductFrame(ttk.Frame):
    def __init__(self, parent, ledger, tabs: Optional[InventoryTabs] = None):
        super().__init__(parent)
        self.ledger = ledger
        self.tabs = tabs
        self._editing_id: Optional[str] = None

        frm = ttk.LabelFrame(self, text="Add / edit product")
        frm.pack(fill="x", padx=8, pady=8)

        self.var_name = tk.StringVar()
        self.var_cat = tk.StringVar(value=CATEGORIES[0])
        self.var_price = tk.StringVar()
        self.var_qty = tk.StringVar(value="0")
        self.var_sku = tk.StringVar()
        self.var_serialized = tk.BooleanVar(value=False)

        ttk.Label(frm, text="Name").grid(row=0, column=0, sticky="w", padx=4, pady=2)
        ttk.Entry(frm, textvariable=self.var_name, width=34).grid(row=0, column=1, sticky="w", padx=4, pady=2)

        ttk.Label(frm, text="Category").grid(row=0, column=2, sticky="w", padx=4, pady=2)
        ttk.Combobox(frm, textvariable=self.var_cat, values=list(CATEGORIES), state="readonly", width=16)\
            .grid(row=0, column=3, sticky="w", padx=4, pady=2)

        ttk.Label(frm, text="SKU").grid(row=0, column=4, sticky="w", padx=4, pady=2)
        ttk.Entry(frm, textvariable=self.var_sku, width=18).grid(row=0, column=5, sticky="w", padx=4, pady=2)

        ttk.Label(frm, text="Price").grid(row=1, column=0, sticky="w", padx=4, pady=2)
        ttk.Entry(frm, textvariable=self.var_price, width=16).grid(row=1, column=1, sticky="w", padx=4, pady=2)

        ttk.Label(frm, text="Quantity").grid(row=1, column=2, sticky="w", padx=4, pady=2)
        self.ent_qty = ttk.Entry(frm, textvariable=self.var_qty, width=10)
        self.ent_qty.grid(row=1, column=3, sticky="w", padx=4, pady=2)

        ttk.Checkbutton(frm, text="Track serial numbers", variable=self.var_serialized, command=self._sync_qty)\
            .grid(row=1, column=4, columnspan=2, sticky="w", padx=4, pady=2)

        btns = ttk.Frame(frm)
        btns.grid(row=2, column=5, sticky="e", padx=4, pady=4)
        ttk.Button(btns, text="Save", command=self.on_save).pack(side="left", padx=4)
        ttk.Button(btns, text="New", command=self.on_reset).pack(side="left", padx=4)

        table = ttk.LabelFrame(self, text="Products")
        table.pack(fill="both", expand=True, padx=8, pady=8)

        search = ttk.Frame(table)
        search.pack(fill="x", padx=4, pady=2)
        ttk.Label(search, text="Search (name, SKU, category)").pack(side="left", padx=4)
        self.var_search = tk.StringVar()
        ent = ttk.Entry(search, textvariable=self.var_search, width=40)
        ent.pack(side="left", padx=4)
        ent.bind("<KeyRelease>", lambda e: self.refresh())

        cols = ("name", "category", "sku", "price", "quantity", "customer")
        self.tree = ttk.Treeview(table, columns=cols, show="headings", height=14)
        for c, w in [("name", 260), ("category", 110), ("sku", 140), ("price", 110), ("quantity", 80), ("customer", 180)]:
            self.tree.heading(c, text=c)
            self.tree.column(c, width=w, anchor="w")
        self.tree.pack(fill="both", expand=True, padx=4, pady=4)
        self.tree.bind("<<TreeviewSelect>>", self.on_select_row)
        self.tree.tag_configure("out", foreground="#b3261e")
        self.tree.tag_configure("low", foreground="#a66300")

        ops = ttk.Frame(table)
        ops.pack(fill="x", padx=4, pady=4)
        ttk.Button(ops, text="Serial numbers...", command=self.on_serials).pack(side="left", padx=4)
        ttk.Button(ops, text="Remove", command=self.on_delete).pack(side="left", padx=4)

        self.refresh()

    def _sync_qty(self):
        # serialized quantity is driven by serial numbers
        if self.var_serialized.get():
            self.var_qty.set("0" if self._editing_id is None else self.var_qty.get())
            self.ent_qty.configure(state="disabled")
        else:
            self.ent_qty.configure(state="normal")

    def _changed(self):
        if self.tabs is not None:
            self.tabs.changed()
        else:
            self.refresh()

    def on_select_row(self, _evt=None):
        pid = selected_id(self.tree)
        p = self.ledger.get_product(pid) if pid else None
        if p is None:
            return
        self._editing_id = p.id
        self.var_name.set(p.name)
        self.var_cat.set(p.category)
        self.var_price.set(str(p.price))
        self.var_qty.set(str(p.quantity))
        self.var_sku.set(p.sku)
        self.var_serialized.set(p.is_serialized)
        self._sync_qty()

    def on_save(self):
        name = self.var_name.get().strip()
        price = safe_float(self.var_price.get(), None)
        qty = safe_int(self.var_qty.get(), None)

        if not name:
            messagebox.showwarning("Input", "Enter a product name", parent=self)
            return
        if price is None or price < 0:
            messagebox.showwarning("Input", "Price is not valid", parent=self)
            return
        if qty is None or qty < 0:
            messagebox.showwarning("Input", "Quantity is not valid", parent=self)
            return

        data = {
            "name": name,
            "category": self.var_cat.get(),
            "price": price,
            "quantity": qty,
            "is_serialized": self.var_serialized.get(),
            "sku": self.var_sku.get(),
        }
        if self._editing_id is None:
            result = self.ledger.add_product(data)
        else:
            result = self.ledger.update_product(self._editing_id, data)
        if result.ok:
            self.on_reset()
            self._changed()

    def on_reset(self):
        self._editing_id = None
        self.tree.selection_remove(self.tree.selection())
        self.var_name.set("")
        self.var_cat.set(CATEGORIES[0])
        self.var_price.set("")
        self.var_qty.set("0")
        self.var_sku.set("")
        self.var_serialized.set(False)
        self._sync_qty()

    def on_serials(self):
        pid = selected_id(self.tree)
        p = self.ledger.get_product(pid) if pid else None
        if p is None:
            messagebox.showwarning("Serial numbers", "Select a product", parent=self)
            return
        if not p.is_serialized:
            messagebox.showinfo("Serial numbers", f'"{p.name}" does not track serial numbers', parent=self)
            return
        SerialManagerDialog(self, self.ledger, p.id, on_changed=self._changed)

    def on_delete(self):
        pid = selected_id(self.tree)
        p = self.ledger.get_product(pid) if pid else None
        if p is None:
            messagebox.showwarning("Remove", "Select a product", parent=self)
            return
        if not confirm_delete(self, self.ledger, f'product "{p.name}" and all of its serial numbers'):
            return
        show_result(self, self.ledger.delete_product(p.id))
        self.on_reset()
        self._changed()

    def refresh(self):
        threshold = int(self.ledger.get_setting("low_stock_threshold", 5) or 0)
        self.tree.delete(*self.tree.get_children())
        for p in self.ledger.search_products(self.var_search.get()):
            customer = self.ledger.customer_for_pc_product(p.id) if p.category == CUSTOM_PC else None
            tag = "out" if p.quantity == 0 else ("low" if p.quantity <= threshold else "")
            self.tree.insert("", "end", iid=p.id, tags=(tag,) if tag else (), values=(
                p.name,
                p.category,
                p.sku,
                self.ledger.money_str(p.price),
                p.quantity,
                customer.name if customer else "",
            ))


class SerialManagerDialog(tk.Toplevel):
    def __init__(self, parent, ledger, product_id: str, *, on_changed=None):
        super().__init__(parent)
        self.ledger = ledger
        self.product_id = product_id
        self.on_changed = on_changed

        product = ledger.get_product(product_id)
        self.title(f"Serial numbers: {product.name}")
        self.geometry("560x420")
        self.transient(parent)

        box = ttk.Frame(self)
        box.pack(fill="x", padx=8, pady=8)
        self.var_serial = tk.StringVar()
        ttk.Label(box, text="Serial number").pack(side="left", padx=4)
        ttk.Entry(box, textvariable=self.var_serial, width=30).pack(side="left", padx=4)
        ttk.Button(box, text="Add", command=self.on_add).pack(side="left", padx=4)
        ttk.Button(box, text="Rename selected", command=self.on_rename).pack(side="left", padx=4)

        cols = ("serial_number", "status")
        self.tree = ttk.Treeview(self, columns=cols, show="headings", height=12)
        for c, w in [("serial_number", 300), ("status", 160)]:
            self.tree.heading(c, text=c)
            self.tree.column(c, width=w, anchor="w")
        self.tree.pack(fill="both", expand=True, padx=8, pady=4)
        self.tree.bind("<<TreeviewSelect>>", self.on_select)

        ops = ttk.Frame(self)
        ops.pack(fill="x", padx=8, pady=8)
        ttk.Button(ops, text="Remove", command=self.on_delete).pack(side="left", padx=4)
        ttk.Button(ops, text="Close", command=self.destroy).pack(side="right", padx=4)

        self.refresh()

    def _changed(self):
        self.refresh()
        if callable(self.on_changed):
            self.on_changed()

    def on_select(self, _evt=None):
        sid = selected_id(self.tree)
        s = self.ledger.get_serial(sid) if sid else None
        if s is not None:
            self.var_serial.set(s.serial_number)

    def on_add(self):
        serial = self.var_serial.get().strip()
        if not serial:
            messagebox.showwarning("Input", "Enter a serial number", parent=self)
            return
        if self.ledger.add_serial_number(self.product_id, serial).ok:
            self.var_serial.set("")
            self._changed()

    def on_rename(self):
        sid = selected_id(self.tree)
        if not sid:
            messagebox.showwarning("Rename", "Select a serial number", parent=self)
            return
        if self.ledger.update_serial_number(sid, self.var_serial.get()).ok:
            self._changed()

    def on_delete(self):
        sid = selected_id(self.tree)
        s = self.ledger.get_serial(sid) if sid else None
        if s is None:
            messagebox.showwarning("Remove", "Select a serial number", parent=self)
            return
        if not confirm_delete(self, self.ledger, f'serial number "{s.serial_number}"'):
            return
        show_result(self, self.ledger.delete_serial_number(s.id))
        self._changed()

    def refresh(self):
        rows = self.ledger.list_serials(self.product_id)
        fill_tree(self.tree, [(s.serial_number, s.status) for s in rows], [s.id for s in rows])
        for s in rows:
            if s.status != IN_STOCK:
                self.tree.item(s.id, tags=("locked",))
        self.tree.tag_configure("locked", foreground="gray")


class StockChartFrame(ttk.Frame):
    def __init__(self, parent, ledger):
        super().__init__(parent)
        self.ledger = ledger

        fig = Figure(figsize=(10, 5), dpi=100)
        self.ax = fig.add_subplot(111)
        self.canvas = FigureCanvasTkAgg(fig, master=self)
        self.canvas.get_tk_widget().pack(fill="both", expand=True, padx=8, pady=8)
        self.fig = fig

    def refresh(self):
        self.plot()

    def plot(self):
        self.ax.clear()
        data = self.ledger.stock_by_category()
        if not data:
            self.ax.set_title("No products yet")
            self.canvas.draw()
            return

        cats = [c for c in CATEGORIES if c in data]
        self.ax.bar(cats, [data[c] for c in cats])
        self.ax.set_title("Units in stock by category")
        self.ax.set_xlabel("Category")
        self.ax.set_ylabel("Units")
        self.fig.autofmt_xdate()
        self.canvas.draw()
