# cli.py
import sys
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table
from rich.text import Text

from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style as PromptStyle

from boutique.auth import LOGIN_FAILED_MESSAGE, AdminSession
from boutique.cart import NO_OPTION, UNSELECTED, can_add
from boutique.catalog import CatalogStore
from boutique.checkout import PAYMENT_INSTRUCTIONS, CheckoutState, OrderSummary, Receipt
from boutique.config import get_settings
from boutique.core import ProductIn, ProductPatch, parse_option_values
from boutique.database import FileStorage, MemoryStorage, Storage
from boutique.log import add_context, configure_logging, get_logger
from boutique.models import Product
from boutique.shop import CartView, ShopError, Storefront

console = Console()
logger = get_logger("boutique.cli")

status_message = "Ready"

custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
    'scrollbar.background': 'bg:#88aaaa',
    'scrollbar.button': 'bg:#222222',
})


def yen(amount: int) -> str:
    return f"¥{amount:,}"


# ---------------------------
# Display helpers
# ---------------------------
def show_products(products: List[Product], title: str = "💍 Catalog"):
    if not products:
        console.print("[italic yellow]No products found[/italic yellow]")
        return

    table = Table(
        title=title,
        box=box.ROUNDED,
        header_style="bold cyan",
        title_style="bold magenta",
        show_lines=True
    )
    table.add_column("#", justify="right", width=3)
    table.add_column("ID", style="dim", width=12)
    table.add_column("Name", style="bold", width=20)
    table.add_column("Price", justify="right", width=10)
    table.add_column("Stock", justify="right", width=8)
    table.add_column("Options", width=22)
    table.add_column("Details", width=30)

    for index, p in enumerate(products, start=1):
        stock = str(p.stock) if p.in_stock else "[red]Sold out[/red]"
        options = f"{p.options.label}: {', '.join(p.options.values)}" if p.options else "-"
        table.add_row(
            str(index),
            p.id[:12],
            p.name,
            yen(p.price),
            stock,
            options,
            p.detail_url or "-",
        )
    console.print(table)


def show_cart(view: CartView):
    title = Text()
    title.append("🛒 Cart", style="bold")
    title.append(f" - {view.item_count} item(s) - Total: {yen(view.total)}", style="bold green")

    if not view.items:
        console.print(Panel("Your cart is empty 🛍️", title=title, style="blue"))
        return

    table = Table(box=box.ROUNDED, header_style="bold blue", show_lines=True)
    table.add_column("Product", style="bold", width=24)
    table.add_column("Option", width=10)
    table.add_column("Qty", justify="right", width=6)
    table.add_column("Price", justify="right", width=10)
    table.add_column("Subtotal", justify="right", width=12)

    for it in view.items:
        table.add_row(
            it.name,
            it.selected_option or "-",
            str(it.quantity),
            yen(it.price),
            yen(it.line_total),
        )
    console.print(Panel(table, title=title, border_style="blue"))


def show_summary(summary: OrderSummary):
    table = Table(box=box.ROUNDED, header_style="bold yellow", show_lines=True,
                  title="🧾 Order summary", title_style="bold yellow")
    table.add_column("Item", width=30)
    table.add_column("Qty", justify="right", width=6)
    table.add_column("Subtotal", justify="right", width=12)
    for line in summary.lines:
        name = f"{line.name} ({line.selected_option})" if line.selected_option else line.name
        table.add_row(name, str(line.quantity), yen(line.line_total))
    table.add_row("[bold]Total[/bold]", str(summary.item_count), f"[bold]{yen(summary.total)}[/bold]")
    console.print(table)
    console.print(Panel(summary.instructions, title="How to pay", border_style="blue"))


def show_payment(summary: OrderSummary):
    console.print(Panel.fit(
        "\n".join(PAYMENT_INSTRUCTIONS) + f"\n\n[bold]Amount due: {yen(summary.total)}[/bold]",
        title="💳 Payment",
        border_style="red"
    ))


def show_receipt(receipt: Receipt):
    console.print(Panel.fit(
        f"[green]Payment complete. Thank you![/green]\n"
        f"Items: [bold]{sum(line.quantity for line in receipt.lines)}[/bold]\n"
        f"Total: [bold]{yen(receipt.total)}[/bold]",
        title="✅ Order Confirmation"
    ))


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


def show_validation_errors(e: ValidationError):
    for err in e.errors():
        field = ".".join(str(part) for part in err["loc"]) or "form"
        console.print(f"[red]{field}: {err['msg']}[/red]")


# ---------------------------
# Action wrapper
# ---------------------------
def try_action(fn, *args, success_msg: Optional[str] = None, **kwargs):
    """
    Calls fn(*args, **kwargs) and reports the outcome in the status panel.
    Store refusals and bad input are shown, not raised.
    """
    global status_message
    try:
        result = fn(*args, **kwargs)
    except ValidationError as e:
        status_message = "Error: invalid input"
        show_validation_errors(e)
        return None
    except (ShopError, ValueError) as e:
        status_message = f"Error: {e}"
        console.print(show_status(status_message, False))
        return None

    if success_msg:
        status_message = success_msg
        console.print(show_status(success_msg, True))
    return result


# ---------------------------
# Input helpers with autocomplete
# ---------------------------
def prompt_with_autocomplete(message: str, completer=None, default: str = "", is_password: bool = False):
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default,
                  is_password=is_password)


def product_completer(products: List[Product]):
    names = [p.name for p in products]
    ids = [p.id for p in products]
    return WordCompleter([n for n in (names + ids) if n], ignore_case=True, sentence=True)


def choose_product(products: List[Product]) -> Optional[Product]:
    raw = prompt_with_autocomplete("Product (name, ID or #)", completer=product_completer(products)).strip()
    if not raw:
        return None
    if raw.isdigit() and 1 <= int(raw) <= len(products):
        return products[int(raw) - 1]
    for p in products:
        if raw == p.id or raw.lower() == p.name.lower():
            return p
    console.print(f"[red]No product matches '{raw}'[/red]")
    return None


def choose_option(product: Product) -> Optional[str]:
    if product.options is None:
        return NO_OPTION
    return prompt_with_autocomplete(
        f"{product.options.label} ({' / '.join(product.options.values)})",
        completer=WordCompleter(product.options.values, ignore_case=True),
    ).strip() or UNSELECTED


# ---------------------------
# Storefront flows
# ---------------------------
def add_to_cart_flow(shop: Storefront):
    products = shop.products()
    show_products(products)
    product = choose_product(products)
    if product is None:
        return
    option = choose_option(product)
    if not can_add(product, option):
        # Mirror the disabled "add" button: tell the shopper why.
        reason = "sold out" if not product.in_stock else f"choose a valid {product.options.label.lower()}"
        console.print(show_status(f"Cannot add {product.name}: {reason}", False))
        return
    item = try_action(shop.add_to_cart, product.id, option, success_msg=f"Added {product.name} to cart")
    if item is not None:
        show_cart(shop.cart_view())


def change_quantity_flow(shop: Storefront):
    view = shop.cart_view()
    show_cart(view)
    if not view.items:
        return
    labels = [f"{it.name} ({it.selected_option})" if it.selected_option else it.name for it in view.items]
    raw = prompt_with_autocomplete("Which line?", completer=WordCompleter(labels, ignore_case=True,
                                                                           sentence=True)).strip()
    if raw not in labels:
        console.print(f"[red]No cart line matches '{raw}'[/red]")
        return
    item = view.items[labels.index(raw)]
    raw_delta = prompt_with_autocomplete("Change by (e.g. 1 or -1)", default="1").strip()
    try:
        delta = int(raw_delta)
    except ValueError:
        console.print("[red]Please enter a whole number.[/red]")
        return
    try_action(shop.change_quantity, item.product_id, item.selected_option, delta,
               success_msg=f"Updated {item.name}")
    show_cart(shop.cart_view())


def checkout_flow(shop: Storefront):
    # An empty cart leaves the sequencer in BROWSING and the loop is skipped.
    try_action(shop.start_checkout)

    while shop.checkout.state is not CheckoutState.BROWSING:
        summary = shop.checkout.summary()
        if shop.checkout.state is CheckoutState.ORDER_SUMMARY:
            show_summary(summary)
            choice = prompt_with_autocomplete("[p]ay or [b]ack?",
                                              completer=WordCompleter(["p", "b"])).strip().lower()
            if choice == "p":
                shop.checkout.proceed_to_payment()
            elif choice == "b":
                shop.checkout.back()
        else:
            show_payment(summary)
            choice = prompt_with_autocomplete("[c]onfirm payment or [b]ack?",
                                              completer=WordCompleter(["c", "b"])).strip().lower()
            if choice == "c":
                show_receipt(shop.checkout.confirm_payment())
            elif choice == "b":
                shop.checkout.back()


# ---------------------------
# Admin flows
# ---------------------------
def admin_login_flow(admin: AdminSession) -> bool:
    while not admin.is_authenticated():
        password = prompt_with_autocomplete("Admin password (blank to cancel)", is_password=True)
        if not password:
            return False
        if not admin.login(password):
            console.print(f"[red]{LOGIN_FAILED_MESSAGE}[/red]")
    return True


def _product_form(defaults: Optional[Product] = None) -> Dict[str, Any]:
    d = defaults
    form: Dict[str, Any] = {
        "name": prompt_with_autocomplete("Name", default=d.name if d else ""),
        "price": prompt_with_autocomplete("Price (¥)", default=str(d.price) if d else ""),
        "stock": prompt_with_autocomplete("Stock", default=str(d.stock) if d else ""),
        "image": prompt_with_autocomplete("Image URL", default=d.image if d else ""),
        "detailUrl": prompt_with_autocomplete("Detail page URL (optional)",
                                              default=(d.detail_url or "") if d else ""),
    }
    label = prompt_with_autocomplete("Option label, e.g. Size (blank for none)",
                                     default=d.options.label if d and d.options else "")
    values = prompt_with_autocomplete("Option values, comma-separated",
                                      default=", ".join(d.options.values) if d and d.options else "") \
        if label.strip() else ""
    form["options"] = parse_option_values(label, values)
    return form


def admin_add_flow(catalog: CatalogStore):
    form = _product_form()
    try:
        data = ProductIn.model_validate(form)
    except ValidationError as e:
        show_validation_errors(e)
        return
    try_action(catalog.add, data, success_msg=f"Product '{data.name}' added")


def admin_edit_flow(catalog: CatalogStore):
    product = choose_product(catalog.list())
    if product is None:
        return
    form = _product_form(product)
    try:
        patch = ProductPatch.model_validate(form)
    except ValidationError as e:
        show_validation_errors(e)
        return
    try_action(catalog.update, product.id, patch.changes(), success_msg=f"Product '{product.name}' saved")


def admin_menu(storage: Storage, admin: AdminSession, shop: Storefront):
    global status_message

    if not admin_login_flow(admin):
        return
    # The admin screen reads the stored catalog on its own, without seeding.
    catalog = CatalogStore.load(storage)

    while True:
        show_products(catalog.list(), title="🔧 Catalog management")
        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=24)
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=24)
        for row in [
            ("1", "➕ Add product", "4", "⬆️ Move up"),
            ("2", "✏️ Edit product", "5", "⬇️ Move down"),
            ("3", "🗑️ Delete product", "6", "🔒 Log out"),
            ("", "", "b", "🛍️ Back to shop"),
        ]:
            menu_table.add_row(*row)
        console.print(Panel(menu_table, title="🔧 Admin", border_style="red"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter(["1", "2", "3", "4", "5", "6", "b"])
        ).strip().lower()

        if choice == "1":
            admin_add_flow(catalog)
        elif choice == "2":
            admin_edit_flow(catalog)
        elif choice == "3":
            product = choose_product(catalog.list())
            if product and Confirm.ask(f"[red]Delete '{product.name}'?[/red]"):
                try_action(catalog.remove, product.id, success_msg=f"Product '{product.name}' deleted")
        elif choice in ("4", "5"):
            product = choose_product(catalog.list())
            if product:
                move = catalog.move_up if choice == "4" else catalog.move_down
                try_action(move, product.id, success_msg=f"Moved '{product.name}'")
        elif choice == "6":
            admin.logout()
            status_message = "Logged out"
            break
        elif choice == "b":
            break

    # Back on the storefront: pick up the admin's edits.
    shop.reload()


# ---------------------------
# Layout and Header
# ---------------------------
def create_header(shop: Storefront):
    header = Table(show_header=False, box=box.ROUNDED)
    header.add_column("left", width=30)
    header.add_column("center", width=40)
    header.add_column("right", width=30)
    header.add_row(
        "💍 Boutique",
        "[bold blue]Jewelry shop[/bold blue]",
        f"🛒 {shop.cart.item_count()}  {yen(shop.cart.total())}"
    )
    return Panel(header, style="bold blue")


# ---------------------------
# Main menu
# ---------------------------
def menu(shop: Storefront, admin: AdminSession, storage: Storage):
    global status_message

    console.clear()

    while True:
        console.print(create_header(shop))
        if status_message:
            console.print(show_status(status_message, "Error" not in status_message))

        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)

        options = [
            ("1", "📦 List products", "4", "🛒 View cart"),
            ("2", "➕ Add to cart", "5", "✅ Checkout"),
            ("3", "🔢 Change quantity", "6", "🔧 Admin"),
            ("", "", "q", "👋 Quit")
        ]
        for row in options:
            menu_table.add_row(*row)

        console.print(Panel(menu_table, title="📋 Menu", border_style="yellow"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter(["1", "2", "3", "4", "5", "6", "q", "quit", "exit"])
        ).strip()

        if choice == "1":
            show_products(shop.products())
        elif choice == "2":
            add_to_cart_flow(shop)
        elif choice == "3":
            change_quantity_flow(shop)
        elif choice == "4":
            show_cart(shop.cart_view())
        elif choice == "5":
            checkout_flow(shop)
        elif choice == "6":
            admin_menu(storage, admin, shop)
        elif choice.lower() in ("q", "quit", "exit"):
            if Confirm.ask("Are you sure you want to quit?"):
                console.print(Panel.fit("[bold green]Thank you for shopping! 👋[/bold green]", title="Goodbye"))
                sys.exit(0)

        console.print()
        console.rule(style="dim")


def main():
    settings = get_settings()
    configure_logging(settings.environment, settings.log_level or "WARNING")
    add_context(surface="cli")

    storage = FileStorage(settings.storage_dir)
    shop = Storefront(storage)
    # Session slot lives only as long as this process.
    admin = AdminSession(MemoryStorage(), settings.admin_password)
    logger.info("terminal shop started", storage=settings.storage_dir)

    try:
        menu(shop, admin, storage)
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
