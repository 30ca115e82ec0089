from __future__ import annotations

import tkinter as tk
from tkinter import ttk, messagebox
from typing import Optional

from ui.common import confirm_delete, selected_id, show_result


class CustomerTabs(ttk.Frame):
    def __init__(self, parent, ledger, *, on_changed=None):
        super().__init__(parent)
        self.ledger = ledger
        self.on_changed = on_changed
        self._editing_id: Optional[str] = None

        frm = ttk.LabelFrame(self, text="Add / edit customer")
        frm.pack(fill="x", padx=8, pady=8)

        self.var_name = tk.StringVar()
        self.var_email = tk.StringVar()
        self.var_phone = tk.StringVar()
        self.var_address = tk.StringVar()

        ttk.Label(frm, text="Name").grid(row=0, column=0, sticky="w", padx=4, pady=2)
        ttk.Entry(frm, textvariable=self.var_name, width=30).grid(row=0, column=1, sticky="w", padx=4, pady=2)
        ttk.Label(frm, text="Email").grid(row=0, column=2, sticky="w", padx=4, pady=2)
        ttk.Entry(frm, textvariable=self.var_email, width=30).grid(row=0, column=3, sticky="w", padx=4, pady=2)
        ttk.Label(frm, text="Phone").grid(row=1, column=0, sticky="w", padx=4, pady=2)
        ttk.Entry(frm, textvariable=self.var_phone, width=30).grid(row=1, column=1, sticky="w", padx=4, pady=2)
        ttk.Label(frm, text="Address").grid(row=1, column=2, sticky="w", padx=4, pady=2)
        ttk.Entry(frm, textvariable=self.var_address, width=44).grid(row=1, column=3, sticky="w", padx=4, pady=2)

        ttk.Button(frm, text="Save", command=self.on_save).grid(row=0, column=4, sticky="w", padx=6, pady=2)
        ttk.Button(frm, text="New", command=self.on_reset).grid(row=1, column=4, sticky="w", padx=6, pady=2)

        table = ttk.LabelFrame(self, text="Customers")
        table.pack(fill="both", expand=True, padx=8, pady=8)

        search = ttk.Frame(table)
        search.pack(fill="x", padx=4, pady=2)
        ttk.Label(search, text="Search (name, email, phone)").pack(side="left", padx=4)
        self.var_search = tk.StringVar()
        ent = ttk.Entry(search, textvariable=self.var_search, width=40)
        ent.pack(side="left", padx=4)
        ent.bind("<KeyRelease>", lambda e: self.refresh())

        cols = ("name", "email", "phone", "address", "builds")
        self.tree = ttk.Treeview(table, columns=cols, show="headings", height=16)
        for c, w in [("name", 200), ("email", 200), ("phone", 120), ("address", 280), ("builds", 60)]:
            self.tree.heading(c, text=c)
            self.tree.column(c, width=w, anchor="w")
        self.tree.pack(fill="both", expand=True, padx=4, pady=4)
        self.tree.bind("<<TreeviewSelect>>", self.on_select)

        ops = ttk.Frame(table)
        ops.pack(fill="x", padx=4, pady=4)
        ttk.Button(ops, text="Remove", command=self.on_delete).pack(side="left", padx=4)

        self.refresh()

    def _changed(self):
        if callable(self.on_changed):
            self.on_changed()
        else:
            self.refresh()

    def on_reset(self):
        self._editing_id = None
        self.tree.selection_remove(self.tree.selection())
        self.var_name.set("")
        self.var_email.set("")
        self.var_phone.set("")
        self.var_address.set("")

    def on_save(self):
        if not self.var_name.get().strip():
            messagebox.showwarning("Input", "Enter a customer name", parent=self)
            return
        data = {
            "name": self.var_name.get(),
            "email": self.var_email.get(),
            "phone": self.var_phone.get(),
            "address": self.var_address.get(),
        }
        if self._editing_id is None:
            result = self.ledger.add_customer(data)
        else:
            result = self.ledger.update_customer(self._editing_id, data)
        if result.ok:
            self.on_reset()
            self._changed()

    def on_select(self, _e=None):
        cid = selected_id(self.tree)
        cu = self.ledger.get_customer(cid) if cid else None
        if cu is None:
            return
        self._editing_id = cu.id
        self.var_name.set(cu.name)
        self.var_email.set(cu.email)
        self.var_phone.set(cu.phone)
        self.var_address.set(cu.address)

    def on_delete(self):
        cid = selected_id(self.tree)
        cu = self.ledger.get_customer(cid) if cid else None
        if cu is None:
            messagebox.showwarning("Remove", "Select a customer", parent=self)
            return
        if not confirm_delete(self, self.ledger, f'customer "{cu.name}" (assigned builds are kept)'):
            return
        show_result(self, self.ledger.delete_customer(cu.id))
        self.on_reset()
        self._changed()

    def refresh(self):
        counts = {}
        for b in self.ledger.builds:
            if b.customer_id:
                counts[b.customer_id] = counts.get(b.customer_id, 0) + 1
        self.tree.delete(*self.tree.get_children())
        for cu in self.ledger.search_customers(self.var_search.get()):
            self.tree.insert("", "end", iid=cu.id, values=(
                cu.name,
                cu.email,
                cu.phone,
                cu.address,
                counts.get(cu.id, 0),
            ))
