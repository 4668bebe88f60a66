"""Interactive prompts: headless choice and credential capture."""
from __future__ import annotations

from pathlib import Path

from rich.panel import Panel
from rich.prompt import Prompt, Confirm

from .display import console, success_box, info_box, BRAND_PRIMARY

ENV_KEYS = ("PROSHOP_USERNAME", "PROSHOP_PASSWORD", "PROSHOP_REALNAME")


def ask_headless() -> bool:
    """Ask whether Chrome should run without a window."""
    return Confirm.ask("Run Chrome in headless mode?", default=False)


def render_env(values: dict) -> str:
    """Render .env content for the captured credentials."""
    lines = ["# FE Sniper configuration", "# Generated by 'fe-sniper setup'", ""]
    for key in ENV_KEYS:
        lines.append(f"{key}={values.get(key, '')}")
    lines += [
        "",
        "# Poll intervals (seconds)",
        "LISTING_INTERVAL=20",
        "INVENTORY_INTERVAL=5",
        "",
        "# Discord notifications (optional)",
        "DISCORD_WEBHOOK_URL=",
        "",
    ]
    return "\n".join(lines)


def setup_env(env_path: Path = Path(".env")) -> bool:
    """
    Prompt for proshop credentials and write them to .env.

    Returns:
        True if the file was written
    """
    console.print()
    console.print(Panel(
        "[bold]proshop.fi account[/]\n\n"
        "The display name is the name proshop shows in the page header\n"
        "after logging in. It is used to confirm the login worked.",
        title=f"[bold {BRAND_PRIMARY}]Credentials[/]",
        border_style=BRAND_PRIMARY,
        padding=(1, 2),
    ))

    if env_path.exists():
        console.print(info_box(f"{env_path} already exists"))
        if not Confirm.ask(f"Overwrite existing {env_path}?", default=False):
            return False

    values = {
        "PROSHOP_USERNAME": Prompt.ask("Username (email)"),
        "PROSHOP_PASSWORD": Prompt.ask("Password", password=True),
        "PROSHOP_REALNAME": Prompt.ask("Display name"),
    }

    env_path.write_text(render_env(values), encoding="utf-8")
    console.print()
    console.print(success_box(f"Wrote {env_path}"))
    return True
