# app.py
import logging
import os
import tkinter as tk
from tkinter import ttk

from dotenv import load_dotenv

from ledger import Ledger
from ui.builder_tabs import BuilderTabs
from ui.common import ToastBar
from ui.customer_tabs import CustomerTabs
from ui.inventory_tabs import InventoryTabs
from ui.settings_tabs import SettingsTabs

APP_TITLE = "PC Shop Inventory"

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def apply_theme(style: ttk.Style, theme_name: str) -> None:
    names = style.theme_names()
    if theme_name and theme_name in names:
        style.theme_use(theme_name)


def main():
    load_dotenv()
    configure_logging()

    root = tk.Tk()
    root.title(APP_TITLE)
    root.geometry("1200x800")

    # Everything is kept in memory; closing the window discards it.
    ledger = Ledger()
    logger.info("ledger started (in-memory)")

    style = ttk.Style(root)
    apply_theme(style, ledger.get_setting("theme", ""))

    toasts = ToastBar(root, ledger)
    toasts.pack(fill="x", side="bottom")

    notebook = ttk.Notebook(root)
    notebook.pack(fill="both", expand=True)

    def refresh_all():
        inv.refresh_all()
        builder.refresh()
        customers.refresh()

    inv = InventoryTabs(notebook, ledger, on_changed=refresh_all)
    builder = BuilderTabs(notebook, ledger, on_changed=refresh_all)
    customers = CustomerTabs(notebook, ledger, on_changed=refresh_all)

    settings = SettingsTabs(
        notebook,
        ledger,
        style=style,
        on_settings_changed=refresh_all,
    )

    notebook.add(inv, text="Inventory")
    notebook.add(builder, text="Build a PC")
    notebook.add(customers, text="Customers")
    notebook.add(settings, text="Settings")

    root.mainloop()


if __name__ == "__main__":
    main()
