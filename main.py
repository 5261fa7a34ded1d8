"""
HomeBase Pro - terminal client for the home-services marketplace.

Signs in against Supabase, keeps the session on this device, and switches
between the homeowner and provider roles. Each command resumes the stored
session, does one thing, and prints where the app would go next.

Usage:
    python main.py status
    python main.py status --path "/(provider)/(tabs)"
    python main.py login --email jo@example.com
    python main.py switch provider
"""

import argparse
import asyncio
import logging
import sys

from rich.logging import RichHandler
from rich.prompt import Prompt

from core.display import ConsoleNavigator, ConsolePrompter, console, render_state
from modules.auth.guard import resolve_redirect
from modules.auth.models import SignupOutcome, UserRole
from modules.auth.service import ROLE_STORAGE_KEY, SessionController, create_session_controller
from modules.organizations.models import FinancialSummary, OnboardingDetails
from modules.organizations.service import get_organization_service
from shared.config import get_settings
from shared.exceptions import HomeBaseError
from shared.storage import get_device_store


def configure_logging(verbose: bool) -> None:
    """Send log records through rich at the configured level."""
    level = "DEBUG" if verbose else get_settings().log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


async def run_command(args: argparse.Namespace, controller: SessionController) -> int:
    """Run one command against a bootstrapped controller.

    Returns:
        Process exit code
    """
    command = args.command

    if command == "status":
        render_state(controller.state)
        if args.path:
            stored_role = get_device_store().get_item(ROLE_STORAGE_KEY)
            redirect = resolve_redirect(controller.state, args.path, stored_role)
            if redirect is None:
                console.print(f"[green]{args.path}[/green] is allowed")
            else:
                console.print(f"{args.path} redirects to [bold]{redirect.value}[/bold]")
        return 0

    if command == "login":
        email = args.email or Prompt.ask("Email", console=console)
        password = args.password or Prompt.ask("Password", password=True, console=console)
        ok = await controller.login(email, password)
        render_state(controller.state)
        return 0 if ok else 1

    if command == "signup":
        email = args.email or Prompt.ask("Email", console=console)
        password = args.password or Prompt.ask("Password", password=True, console=console)
        name = args.name or Prompt.ask("Name", console=console)
        outcome = await controller.signup(email, password, name, UserRole(args.role))
        render_state(controller.state)
        return 0 if outcome in (SignupOutcome.SIGNED_IN, SignupOutcome.CONFIRMATION_REQUIRED) else 1

    if command == "logout":
        return 0 if await controller.logout() else 1

    if command == "switch":
        ok = await controller.switch_profile(UserRole(args.role))
        render_state(controller.state)
        return 0 if ok else 1

    if command == "refresh":
        ok = await controller.refresh_profile()
        render_state(controller.state)
        return 0 if ok else 1

    # Provider-only commands below
    organization = controller.organization
    if organization is None:
        console.print("[red]Error:[/red] Switch to a provider account first.")
        return 1

    service = get_organization_service()

    if command == "onboard":
        details = OnboardingDetails(
            business_name=args.business_name,
            description=args.description,
            location=args.location,
        )
        await service.complete_onboarding(organization.id, details)
        await controller.refresh_profile()
        render_state(controller.state)
        return 0

    if command == "financials":
        summary = await service.get_financials(organization.id)
        console.print(f"[bold]Revenue this month:[/bold] {FinancialSummary.format_cents(summary.mtd_revenue_cents)}")
        console.print(
            f"[bold]Outstanding:[/bold] {summary.outstanding_invoices_count} invoice(s), "
            f"{FinancialSummary.format_cents(summary.outstanding_invoices_total_cents)}"
        )
        if summary.stripe_connected:
            console.print(f"[bold]Stripe balance:[/bold] {FinancialSummary.format_cents(summary.stripe_balance_cents)}")
        else:
            console.print("[yellow]Stripe not connected[/yellow]")
        return 0

    if command == "stripe-link":
        url = await service.create_stripe_connect_link(organization.id)
        console.print(f"Open this link to connect Stripe:\n{url}")
        return 0

    console.print(f"[red]Error:[/red] Unknown command: {command}")
    return 2


async def main(args: argparse.Namespace) -> int:
    """Bootstrap the controller, run the command, tear down."""
    controller = create_session_controller(
        navigator=ConsoleNavigator(),
        prompter=ConsolePrompter(assume_yes=args.yes),
    )
    async with controller:
        try:
            return await run_command(args, controller)
        except HomeBaseError as e:
            console.print(f"[red]{e.title}:[/red] {e.message}")
            return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="HomeBase Pro terminal client"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("-y", "--yes", action="store_true", help="Answer yes to confirmations")

    sub = parser.add_subparsers(dest="command", required=True)

    status = sub.add_parser("status", help="Show the current session")
    status.add_argument("--path", help="Screen path to check against the route guard")

    login = sub.add_parser("login", help="Sign in with email and password")
    login.add_argument("--email")
    login.add_argument("--password")

    signup = sub.add_parser("signup", help="Create an account")
    signup.add_argument("--email")
    signup.add_argument("--password")
    signup.add_argument("--name")
    signup.add_argument(
        "--role",
        choices=[r.value for r in UserRole],
        default=UserRole.HOMEOWNER.value,
    )

    sub.add_parser("logout", help="Sign out of this device")

    switch = sub.add_parser("switch", help="Switch between homeowner and provider")
    switch.add_argument("role", choices=[r.value for r in UserRole])

    sub.add_parser("refresh", help="Reload profile and organization")

    onboard = sub.add_parser("onboard", help="Finish provider onboarding")
    onboard.add_argument("--business-name")
    onboard.add_argument("--description")
    onboard.add_argument("--location")

    sub.add_parser("financials", help="Show this month's money overview")
    sub.add_parser("stripe-link", help="Get a Stripe Connect onboarding link")

    return parser


if __name__ == "__main__":
    args = build_parser().parse_args()
    configure_logging(args.verbose)

    try:
        sys.exit(asyncio.run(main(args)))
    except RuntimeError as e:
        # Missing Supabase configuration
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
