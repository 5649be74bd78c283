# cli.py - interactive AutoTradeHub storefront with a local cart
import sys
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import IntPrompt, Confirm
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.text import Text
from rich import box

from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style as PromptStyle

from autotradehub.cart import CartAggregator, FileCartStorage
from autotradehub.config import settings
from autotradehub.errors import TradeHubError
from autotradehub.models import PartnerProduct, Product
from sdk.hubclient import HubClient

console = Console()
c = HubClient(base_url=settings.API_BASE_URL)
cart = CartAggregator(FileCartStorage(settings.CART_STORAGE_DIR), settings.CART_STORAGE_KEY)

# Global state for status messages and caching
status_message = "Ready"
product_cache: List[Dict[str, Any]] = []
partner_cache = set()

custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
    'scrollbar.background': 'bg:#88aaaa',
    'scrollbar.button': 'bg:#222222',
})


def money(value: Any) -> str:
    return f"${Decimal(str(value or 0)):,.2f}"


# ---------------------------
# Display helpers
# ---------------------------
def show_products(products: List[Dict[str, Any]]):
    if not products:
        console.print("[italic yellow]No products found[/italic yellow]")
        return

    table = Table(
        title="🚗 Vehicle Catalog",
        box=box.ROUNDED,
        header_style="bold cyan",
        title_style="bold magenta",
        show_lines=True
    )
    table.add_column("ID", style="dim", width=22)
    table.add_column("Title", style="bold", width=28)
    table.add_column("Price", justify="right", width=16)
    table.add_column("Stock", justify="right", width=6)
    table.add_column("Category", width=12)
    table.add_column("Images", justify="right", width=6)

    for p in products:
        table.add_row(
            p.get("id", "N/A"),
            p.get("title", "N/A"),
            money(p.get("original_price")),
            str(p.get("stock_quantity", 0)),
            p.get("category") or "-",
            str(len(p.get("images") or [])),
        )
    console.print(table)


def show_store(listings: List[Dict[str, Any]], partner: str):
    if not listings:
        console.print(f"[italic yellow]No active listings for {partner}[/italic yellow]")
        return
    store_name = listings[0]["partner_product"].get("partner_store_name") or "Partner Store"
    table = Table(title=f"🏪 {store_name}", box=box.ROUNDED, header_style="bold green", show_lines=True)
    table.add_column("Product ID", style="dim", width=22)
    table.add_column("Title", style="bold", width=28)
    table.add_column("Catalog", justify="right", width=16)
    table.add_column("Selling", justify="right", width=16)
    for l in listings:
        table.add_row(
            l["product"]["id"],
            l["product"]["title"],
            money(l["product"].get("original_price")),
            f"[green]{money(l['partner_product'].get('selling_price'))}[/green]",
        )
    console.print(table)


def show_cart():
    title = Text()
    title.append("🛒 Cart", style="bold")
    title.append(f" - {cart.get_item_count()} lines / {cart.get_unit_count()} units", style="bold cyan")
    title.append(f" - Total: {money(cart.get_total())}", style="bold green")

    if not cart.items:
        console.print(Panel("Your cart is empty 🛍️", title=title, style="blue"))
        return

    table = Table(box=box.ROUNDED, header_style="bold blue", show_lines=True)
    table.add_column("Product", style="bold", width=28)
    table.add_column("Store", width=18)
    table.add_column("Qty", justify="right", width=5)
    table.add_column("Unit price", justify="right", width=16)
    table.add_column("Subtotal", justify="right", width=16)
    for it in cart.items:
        table.add_row(
            it.title,
            it.partner_store_name if it.partner_id else "[dim]direct[/dim]",
            str(it.quantity),
            money(it.unit_price),
            money(it.subtotal),
        )
    console.print(Panel(table, title=title, border_style="blue"))


def show_order(order: Dict[str, Any]):
    lines = [
        f"Order: [bold]{order.get('order_number')}[/bold] ({order.get('id')})",
        f"Status: {order.get('status')} / payment {order.get('payment_status')}",
        f"Total: [green]{money(order.get('total_amount'))}[/green] {order.get('currency', '')}",
        f"Shipping: {money(order.get('shipping_fee'))}  Tax: {money(order.get('tax_fee'))}",
    ]
    for it in order.get("items", []):
        lines.append(f"  • {it['product_name']} x{it['quantity']} @ {money(it['unit_price'])}")
    console.print(Panel.fit("\n".join(lines), title="📦 Order", border_style="cyan"))


def show_payout(resp: Dict[str, Any]):
    b = resp["breakdown"]
    console.print(Panel.fit(
        f"[green]Payout processed![/green]\n"
        f"Partner: [bold]{resp['partner_user_id']}[/bold]\n"
        f"Order total: {money(b['total_amount'])}  Base cost: {money(b['base_cost_total'])}\n"
        f"Profit: {money(b['order_profit'])}  Commission ({b['commission_rate']:.0f}%): {money(b['commission_earnings'])}\n"
        f"Credited: [bold]{money(b['total_payout_amount'])}[/bold]",
        title="💰 Payout"
    ))


def show_wallet(wallet: Dict[str, Any]):
    console.print(
        Panel.fit(
            f"💰 [bold]Balance:[/bold] [green]{money(wallet.get('balance'))}[/green]",
            title=f"👛 {wallet.get('user_id', 'Unknown')}'s Wallet",
            border_style="green"
        )
    )


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


# ---------------------------
# API wrapper
# ---------------------------
def try_api(fn, *args, success_msg: Optional[str] = None, **kwargs):
    """
    Calls fn(*args, **kwargs) behind a spinner. Returns the result, or None
    after showing the error in the status panel.
    """
    global status_message
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
        ) as progress:
            progress.add_task(description="Processing...", total=None)
            result = fn(*args, **kwargs)

        if success_msg:
            status_message = success_msg
            console.print(show_status(success_msg, True))
        return result
    except Exception as e:
        status_message = f"Error: {e}"
        console.print(show_status(f"Error: {e}", False))
        return None


# ---------------------------
# Cart actions
# ---------------------------
def add_to_cart(product_id: str, partner: Optional[str], quantity: int) -> bool:
    global status_message
    product_raw = try_api(c.get_product, product_id)
    resolution = try_api(c.resolve_price, product_id, partner)
    if not product_raw or not resolution:
        return False
    if resolution["kind"] == "invalid":
        status_message = f"Error: {resolution['reason']}"
        console.print(show_status(status_message, False))
        return False

    partner_product = None
    if resolution["kind"] == "partner":
        partner_product = PartnerProduct.model_validate(resolution["partner_product"])
    try:
        item = cart.add_item(Product.model_validate(product_raw), partner_product, quantity)
    except TradeHubError as e:
        status_message = f"Error: {e.message}"
        console.print(show_status(status_message, False))
        return False
    status_message = f"Added {quantity} x {item.title} at {money(item.unit_price)}"
    console.print(show_status(status_message, True))
    return True


# ---------------------------
# Autocompletion helpers
# ---------------------------
def get_product_completer():
    global product_cache
    if not product_cache:
        product_cache = try_api(c.list_products) or []
    ids = [p.get("id", "") for p in product_cache]
    return WordCompleter([i for i in ids if i], ignore_case=True)


def get_partner_completer():
    return WordCompleter(sorted(partner_cache), ignore_case=True)


def prompt_with_autocomplete(message: str, completer=None, default: str = ""):
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default)


def create_header():
    header = Table(show_header=False, box=box.ROUNDED)
    header.add_column("left", width=30)
    header.add_column("center", width=40)
    header.add_column("right", width=30)

    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    header.add_row(
        "🚗 AutoTradeHub",
        "[bold blue]B2B Vehicle Marketplace[/bold blue]",
        f"[dim]{now}[/dim]"
    )
    return Panel(header, style="bold blue")


# ---------------------------
# Main menu
# ---------------------------
def menu():
    global status_message, product_cache, partner_cache

    console.clear()
    console.print(create_header())
    product_cache = try_api(c.list_products) or []

    while True:
        if status_message:
            console.print(show_status(status_message, "Error" not in status_message))

        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)

        options = [
            ("1", "📦 List products", "8", "🧹 Clear cart"),
            ("2", "💲 Price a product", "9", "🔍 Look up order"),
            ("3", "🏪 Browse partner store", "10", "💰 Pay out order"),
            ("4", "➕ Add to cart", "11", "👛 View wallet"),
            ("5", "➖ Remove from cart", "12", "🔧 Reconcile data"),
            ("6", "✏️ Change quantity", "13", "🌱 Seed demo data"),
            ("7", "🛒 View cart", "q", "👋 Quit"),
        ]
        for row in options:
            menu_table.add_row(*row)
        console.print(Panel(menu_table, title="📋 Menu", border_style="yellow"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter([str(i) for i in range(1, 14)] + ["q", "quit", "exit"])
        ).strip()

        if choice == "1":
            products = try_api(c.list_products, success_msg="Products loaded successfully")
            if products is not None:
                product_cache = products
                show_products(products)

        elif choice == "2":
            pid = prompt_with_autocomplete("Enter product ID", completer=get_product_completer())
            partner = prompt_with_autocomplete("Partner (blank for catalog price)", completer=get_partner_completer()).strip()
            res = try_api(c.resolve_price, pid, partner or None)
            if res:
                if res["kind"] == "invalid":
                    console.print(show_status(f"No valid price: {res['reason']}", False))
                else:
                    console.print(Panel.fit(f"{res['kind']} price: [bold green]{money(res['price'])}[/bold green]"))

        elif choice == "3":
            partner = prompt_with_autocomplete("Partner profile or user id", completer=get_partner_completer()).strip()
            partner_cache.add(partner)
            listings = try_api(c.store_products, partner, success_msg=f"Store {partner} loaded")
            if listings is not None:
                show_store(listings, partner)

        elif choice == "4":
            pid = prompt_with_autocomplete("Enter product ID", completer=get_product_completer())
            partner = prompt_with_autocomplete("Partner (blank for direct purchase)", completer=get_partner_completer()).strip()
            if partner:
                partner_cache.add(partner)
            qty = IntPrompt.ask("Enter quantity", default=1)
            if add_to_cart(pid, partner or None, qty):
                show_cart()

        elif choice == "5":
            pid = prompt_with_autocomplete("Enter product ID", completer=get_product_completer())
            cart.remove_item(pid)
            show_cart()

        elif choice == "6":
            pid = prompt_with_autocomplete("Enter product ID", completer=get_product_completer())
            qty = IntPrompt.ask("New quantity (0 removes)", default=1)
            cart.update_quantity(pid, qty)
            show_cart()

        elif choice == "7":
            show_cart()

        elif choice == "8":
            partner = prompt_with_autocomplete("Partner user id (blank clears everything)", completer=get_partner_completer()).strip()
            if partner:
                cart.clear_partner_cart(partner)
            elif Confirm.ask("Clear the whole cart?"):
                cart.clear_cart()
            show_cart()

        elif choice == "9":
            ref = prompt_with_autocomplete("Order id or order number")
            order = try_api(c.lookup_order, ref)
            if order:
                show_order(order)
            elif order is None and not status_message.startswith("Error"):
                console.print("[italic yellow]Order not found[/italic yellow]")

        elif choice == "10":
            order_id = prompt_with_autocomplete("Order id")
            r = try_api(c.process_payout, order_id)
            if r is not None:
                body = r.json()
                if r.status_code == 200:
                    show_payout(body)
                else:
                    console.print(Panel.fit(f"[red]Payout failed:[/red] {body.get('error', body)}", title="❌ Payout"))

        elif choice == "11":
            user_id = prompt_with_autocomplete("Partner user id", completer=get_partner_completer())
            wallet = try_api(c.view_wallet, user_id, success_msg=f"Wallet loaded for {user_id}")
            if wallet:
                show_wallet(wallet)

        elif choice == "12":
            resp = try_api(c.reconcile, success_msg="Reconciliation finished")
            if resp:
                console.print(resp["report"])

        elif choice == "13":
            resp = try_api(c.seed, success_msg="Demo data loaded")
            if resp:
                console.print(resp)
                product_cache = try_api(c.list_products) or []

        elif choice.lower() in ("q", "quit", "exit"):
            if Confirm.ask("Are you sure you want to quit?"):
                console.print(Panel.fit("[bold green]Thank you for using AutoTradeHub! 👋[/bold green]", title="Goodbye"))
                sys.exit(0)

        console.print()
        console.rule(style="dim")


if __name__ == "__main__":
    try:
        menu()
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        sys.exit(1)
