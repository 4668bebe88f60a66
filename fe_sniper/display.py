"""Terminal display utilities using rich."""
from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

from .cache import SkuCache
from .sku import GpuModel

# NVIDIA green
BRAND_PRIMARY = "#76B900"
BRAND_SUCCESS = "#00D26A"
BRAND_ERROR = "#FF3B3B"
BRAND_WARNING = "#FFA500"

console = Console()

LOGO_SMALL = f"[bold {BRAND_PRIMARY}]◆[/] [bold white]FE SNIPER[/]"

TAGLINE = "[dim italic]Founders Edition stock watcher[/]"


def print_banner(version: str) -> None:
    """Print a compact banner."""
    console.print()
    console.print(Panel(
        f"{LOGO_SMALL} [dim]v{version}[/]  {TAGLINE}",
        border_style=BRAND_PRIMARY,
        padding=(0, 2),
    ))
    console.print()


def _format_update(update_at: Optional[int]) -> str:
    if not update_at:
        return "[dim]never[/]"
    return datetime.fromtimestamp(update_at / 1000).strftime("%Y-%m-%d %H:%M:%S")


def sku_table(cache: SkuCache, stock: Optional[Dict[GpuModel, Optional[bool]]] = None) -> Table:
    """Table of cached SKUs, optionally with the latest stock classification."""
    table = Table(
        show_header=True,
        header_style=f"bold {BRAND_PRIMARY}",
        border_style="dim",
        box=box.ROUNDED,
        title=f"[bold {BRAND_PRIMARY}]◆[/] [bold white]Tracked SKUs[/]",
        title_justify="left",
        padding=(0, 1),
    )

    table.add_column("GPU", style="bold white", width=10)
    table.add_column("Product", min_width=20)
    table.add_column("SKU", style="cyan")
    table.add_column("Updated", style="dim")
    if stock is not None:
        table.add_column("Stock", justify="center", width=10)

    for model, record in cache.snapshot():
        row = [
            model.value,
            record.product_title or record.display_name,
            record.product_sku,
            _format_update(record.update_at),
        ]
        if stock is not None:
            state = stock.get(model)
            if state is True:
                row.append(f"[{BRAND_SUCCESS}]✓ IN[/]")
            elif state is False:
                row.append("[dim]○ out[/]")
            else:
                row.append(f"[{BRAND_WARNING}]? error[/]")
        table.add_row(*row)

    return table


def success_box(message: str, title: str = "Success") -> Panel:
    """Create a success message box."""
    return Panel(
        f"[{BRAND_SUCCESS}]✓[/] {message}",
        title=f"[bold {BRAND_SUCCESS}]{title}[/]",
        border_style=BRAND_SUCCESS,
        padding=(0, 2),
    )


def error_box(message: str, title: str = "Error") -> Panel:
    """Create an error message box."""
    return Panel(
        f"[{BRAND_ERROR}]✗[/] {message}",
        title=f"[bold {BRAND_ERROR}]{title}[/]",
        border_style=BRAND_ERROR,
        padding=(0, 2),
    )


def info_box(message: str, title: str = "Info") -> Panel:
    """Create an info message box."""
    return Panel(
        f"[{BRAND_PRIMARY}]ℹ[/] {message}",
        title=f"[bold {BRAND_PRIMARY}]{title}[/]",
        border_style=BRAND_PRIMARY,
        padding=(0, 2),
    )
