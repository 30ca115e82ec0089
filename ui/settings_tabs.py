from __future__ import annotations

import tkinter as tk
from tkinter import ttk, messagebox

from naming import get_api_key
from utils import safe_int


class SettingsTabs(ttk.Frame):
    def __init__(self, parent, ledger, *, style: ttk.Style, on_settings_changed=None):
        super().__init__(parent)
        self.ledger = ledger
        self.style = style
        self.on_settings_changed = on_settings_changed

        outer = ttk.Frame(self)
        outer.pack(fill="both", expand=True, padx=10, pady=10)

        # ---- Appearance ----
        lf = ttk.LabelFrame(outer, text="Display (theme / prices)")
        lf.pack(fill="x", padx=6, pady=6)

        ttk.Label(lf, text="Theme").grid(row=0, column=0, sticky="w", padx=4, pady=4)
        self.var_theme = tk.StringVar(value=self.ledger.get_setting("theme", ""))
        themes = list(self.style.theme_names())
        self.cb_theme = ttk.Combobox(lf, textvariable=self.var_theme, values=themes, state="readonly", width=30)
        self.cb_theme.grid(row=0, column=1, sticky="w", padx=4, pady=4)
        ttk.Button(lf, text="Apply", command=self.apply_theme).grid(row=0, column=2, sticky="w", padx=6, pady=4)

        ttk.Label(lf, text="Prices").grid(row=1, column=0, sticky="w", padx=4, pady=4)
        self.var_price_mode = tk.StringVar(value=self.ledger.get_setting("price_mode", "int"))
        ttk.Radiobutton(lf, text="Whole (e.g. 1200)", variable=self.var_price_mode, value="int", command=self.save_price_mode).grid(row=1, column=1, sticky="w", padx=4, pady=2)
        ttk.Radiobutton(lf, text="Decimal (e.g. 1200.00)", variable=self.var_price_mode, value="float", command=self.save_price_mode).grid(row=2, column=1, sticky="w", padx=4, pady=2)

        self.var_decimals = tk.StringVar(value=str(self.ledger.get_setting("price_decimals", 2)))
        ttk.Label(lf, text="Decimals").grid(row=2, column=0, sticky="w", padx=4, pady=4)
        self.sp_dec = ttk.Spinbox(lf, from_=0, to=6, textvariable=self.var_decimals, width=6, command=self.save_decimals)
        self.sp_dec.grid(row=2, column=2, sticky="w", padx=6, pady=2)

        ttk.Label(lf, text="Currency").grid(row=3, column=0, sticky="w", padx=4, pady=4)
        self.var_currency = tk.StringVar(value=self.ledger.get_setting("currency", "DKK"))
        ttk.Entry(lf, textvariable=self.var_currency, width=8).grid(row=3, column=1, sticky="w", padx=4, pady=4)
        ttk.Button(lf, text="Save", command=self.save_currency).grid(row=3, column=2, sticky="w", padx=6, pady=4)

        # ---- Stock ----
        lf2 = ttk.LabelFrame(outer, text="Stock and safety")
        lf2.pack(fill="x", padx=6, pady=6)

        ttk.Label(lf2, text="Low stock at or below").grid(row=0, column=0, sticky="w", padx=4, pady=4)
        self.var_threshold = tk.StringVar(value=str(self.ledger.get_setting("low_stock_threshold", 5)))
        ttk.Spinbox(lf2, from_=0, to=1000, textvariable=self.var_threshold, width=6, command=self.save_threshold)\
            .grid(row=0, column=1, sticky="w", padx=4, pady=4)

        self.var_confirm = tk.BooleanVar(value=bool(self.ledger.get_setting("confirm_deletes", True)))
        ttk.Checkbutton(
            lf2,
            text="Ask before removing products, serial numbers and customers",
            variable=self.var_confirm,
            command=self.save_confirm
        ).grid(row=1, column=0, columnspan=3, sticky="w", padx=4, pady=4)

        # ---- Name suggestions ----
        lf3 = ttk.LabelFrame(outer, text="Name suggestions")
        lf3.pack(fill="x", padx=6, pady=6)
        status = "configured" if get_api_key() else "not set (GEMINI_API_KEY); date based names are used"
        ttk.Label(lf3, text=f"API key: {status}").grid(row=0, column=0, sticky="w", padx=4, pady=4)

        ttk.Button(outer, text="Reset settings", command=self.reset_settings).pack(anchor="w", padx=6, pady=6)

        self._sync_controls()

    def _sync_controls(self):
        mode = self.var_price_mode.get()
        state = "normal" if mode == "float" else "disabled"
        self.sp_dec.configure(state=state)

    def _notify_changed(self):
        if callable(self.on_settings_changed):
            self.on_settings_changed()

    def apply_theme(self):
        theme = self.var_theme.get()
        if theme and theme in self.style.theme_names():
            try:
                self.style.theme_use(theme)
            except tk.TclError as e:
                messagebox.showerror("Error", str(e), parent=self)
                return
            self.ledger.set_setting("theme", theme)
            self._notify_changed()

    def save_price_mode(self):
        mode = self.var_price_mode.get()
        if mode not in ("int", "float"):
            mode = "int"
        self.ledger.set_setting("price_mode", mode)
        self._sync_controls()
        self._notify_changed()

    def save_decimals(self):
        dec = safe_int(self.var_decimals.get(), 2)
        dec = max(0, min(6, dec))
        self.var_decimals.set(str(dec))
        self.ledger.set_setting("price_decimals", dec)
        self._notify_changed()

    def save_currency(self):
        self.ledger.set_setting("currency", self.var_currency.get().strip().upper())
        self._notify_changed()

    def save_threshold(self):
        n = max(0, safe_int(self.var_threshold.get(), 5))
        self.var_threshold.set(str(n))
        self.ledger.set_setting("low_stock_threshold", n)
        self._notify_changed()

    def save_confirm(self):
        self.ledger.set_setting("confirm_deletes", bool(self.var_confirm.get()))

    def reset_settings(self):
        if not messagebox.askyesno("Confirm", "Reset all settings?", parent=self):
            return
        self.ledger.reset_settings()
        self.var_theme.set(self.ledger.get_setting("theme", ""))
        self.var_price_mode.set(self.ledger.get_setting("price_mode", "int"))
        self.var_decimals.set(str(self.ledger.get_setting("price_decimals", 2)))
        self.var_currency.set(self.ledger.get_setting("currency", "DKK"))
        self.var_threshold.set(str(self.ledger.get_setting("low_stock_threshold", 5)))
        self.var_confirm.set(bool(self.ledger.get_setting("confirm_deletes", True)))
        self._sync_controls()
        self._notify_changed()
