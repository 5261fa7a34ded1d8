"""Rich terminal UI for the session controller."""

import asyncio
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table

from modules.auth.models import AuthState, Notice, Route

console = Console()


ROUTE_TITLES = {
    Route.LOGIN: "Sign In",
    Route.PROVIDER_HOME: "Provider Dashboard",
    Route.HOMEOWNER_HOME: "Homeowner Dashboard",
    Route.PROVIDER_ONBOARDING: "Provider Onboarding: Business Basics",
}


class ConsolePrompter:
    """Shows notices as panels and asks confirmations on the terminal."""

    def __init__(self, assume_yes: bool = False):
        self._assume_yes = assume_yes

    async def alert(self, notice: Notice) -> None:
        console.print(
            Panel(notice.message, title=notice.title, border_style="yellow")
        )

    async def confirm(self, notice: Notice) -> bool:
        console.print(Panel(notice.message, title=notice.title, border_style="blue"))
        if self._assume_yes:
            console.print(f"[dim]{notice.confirm_label} (assumed)[/dim]")
            return True
        question = f"{notice.confirm_label}?"
        return await asyncio.to_thread(Confirm.ask, question, console=console)


class ConsoleNavigator:
    """Remembers the last screen the controller asked for and prints it."""

    def __init__(self) -> None:
        self.current: Optional[Route] = None

    def replace(self, route: Route) -> None:
        self.current = route
        title = ROUTE_TITLES.get(route, route.value)
        console.print(f"[bold cyan]→ {title}[/bold cyan] [dim]{route.value}[/dim]")


def render_state(state: AuthState) -> None:
    """Print a summary table of the session state."""
    table = Table(title="Session", show_header=False, box=None)
    table.add_column("Field", style="dim")
    table.add_column("Value")

    if not state.is_authenticated:
        table.add_row("Status", "[yellow]Signed out[/yellow]")
        if state.session is not None:
            table.add_row("Note", "Session present but no profile loaded")
        console.print(table)
        return

    user = state.user
    table.add_row("Status", "[green]Signed in[/green]")
    table.add_row("Name", user.name or "-")
    table.add_row("Email", user.email or "-")
    table.add_row("Role", user.role.value)
    if state.session and state.session.expires_at:
        table.add_row("Session expires", state.session.expires_at.isoformat())

    org = state.organization
    if org is not None:
        table.add_row("Business", org.business_name)
        table.add_row(
            "Onboarding",
            "[green]complete[/green]" if org.onboarding_completed else "[yellow]incomplete[/yellow]",
        )
        table.add_row("Stripe", "connected" if org.stripe_account_id else "not connected")

    console.print(table)
