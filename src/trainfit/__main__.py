"""TrainFit account CLI.

Examples:
  trainfit signup --name Alex --email a@x.com
  trainfit signin --email a@x.com
  trainfit profile --name "Alex B." --change-password
  trainfit avatar ~/Pictures/me.png
  trainfit history
"""

from __future__ import annotations

import argparse
import asyncio
import getpass
import logging
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version

from rich.console import Console
from rich.prompt import Prompt
from rich.table import Table

from trainfit.account import (
    AssetGuard,
    HistoryView,
    NotAuthenticatedError,
    ProfileUpdateOrchestrator,
    SignInFlow,
    SignInForm,
    SignUpFlow,
    SignUpForm,
    UpdateResult,
    UpdateStatus,
)
from trainfit.config import get_settings
from trainfit.local_assets import FileAssetSource
from trainfit.logging_setup import setup_logging
from trainfit.notifications import ConsoleNotificationSink
from trainfit.session.store import SessionStore

logger = logging.getLogger(__name__)
console = Console()

_EXIT_CODES = {
    UpdateStatus.SUCCESS: 0,
    UpdateStatus.CANCELLED: 0,
    UpdateStatus.FAILED: 1,
    UpdateStatus.REJECTED: 1,
    UpdateStatus.BLOCKED: 1,
    UpdateStatus.INVALID: 2,
}


def _version() -> str:
    try:
        return get_version("trainfit")
    except PackageNotFoundError:
        return "unknown"


def _report(result: UpdateResult) -> int:
    for field_name, message in result.validation.errors.items():
        console.print(f"[red]{field_name}:[/red] {message}")
    return _EXIT_CODES[result.status]


async def cmd_signin(args: argparse.Namespace, store: SessionStore) -> int:
    password = getpass.getpass("Password: ")
    flow = SignInFlow(store, ConsoleNotificationSink(console))
    result = await flow.submit(SignInForm(email=args.email, password=password))
    if result.ok and result.identity:
        console.print(f"Signed in as [bold]{result.identity.name}[/bold]")
    return _report(result)


async def cmd_signup(args: argparse.Namespace, store: SessionStore) -> int:
    password = getpass.getpass("Password: ")
    confirm = getpass.getpass("Confirm your password: ")
    flow = SignUpFlow(store.api, store, ConsoleNotificationSink(console))
    form = SignUpForm(name=args.name, email=args.email, password=password, password_confirm=confirm)
    result = await flow.submit(form)
    if result.ok and result.identity:
        console.print(f"Welcome, [bold]{result.identity.name}[/bold]!")
    return _report(result)


async def cmd_whoami(args: argparse.Namespace, store: SessionStore) -> int:
    identity = store.get_current_identity()
    console.print(f"[bold]{identity.name}[/bold] <{identity.email}>")
    console.print(f"Avatar: {store.api.avatar_url(identity.avatar) or '(default)'}")
    return 0


async def cmd_profile(args: argparse.Namespace, store: SessionStore) -> int:
    orchestrator = ProfileUpdateOrchestrator(store, store.api, ConsoleNotificationSink(console))
    form = orchestrator.new_form()
    if args.name is not None:
        form.name = args.name
    if args.change_password:
        form.old_password = getpass.getpass("Old password: ")
        form.new_password = getpass.getpass("New password: ")
        form.confirm_password = getpass.getpass("Re-enter password: ")
    return _report(await orchestrator.submit_profile(form))


async def cmd_avatar(args: argparse.Namespace, store: SessionStore) -> int:
    async def choose() -> str | None:
        if args.path:
            return args.path
        answer = await asyncio.to_thread(Prompt.ask, "Image path (empty to cancel)", default="")
        return answer.strip() or None

    orchestrator = ProfileUpdateOrchestrator(
        store, store.api, ConsoleNotificationSink(console), AssetGuard(FileAssetSource(choose))
    )
    result = await orchestrator.replace_avatar()
    if result.status is UpdateStatus.CANCELLED:
        console.print("No image selected.")
    return _report(result)


async def cmd_history(args: argparse.Namespace, store: SessionStore) -> int:
    view = HistoryView(store.api, ConsoleNotificationSink(console))
    days = await view.refresh()
    if not days:
        console.print("No exercises recorded yet.")
        return 0
    for day in days:
        table = Table(title=day.title, show_header=True)
        table.add_column("Group")
        table.add_column("Exercise")
        table.add_column("Hour")
        for entry in day.data:
            table.add_row(entry.group, entry.name, entry.hour)
        console.print(table)
    return 0


async def cmd_signout(args: argparse.Namespace, store: SessionStore) -> int:
    if store.sign_out():
        console.print("Signed out.")
    else:
        console.print("No active session.")
    return 0


COMMANDS = {
    "signin": cmd_signin,
    "signup": cmd_signup,
    "signout": cmd_signout,
    "whoami": cmd_whoami,
    "profile": cmd_profile,
    "avatar": cmd_avatar,
    "history": cmd_history,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trainfit",
        description="TrainFit account client",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("\n", 2)[2],
    )
    parser.add_argument("--version", "-v", action="version", version=f"%(prog)s {_version()}")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("signin", help="Sign in to your account")
    p.add_argument("--email", required=True)

    p = sub.add_parser("signup", help="Create an account and sign in")
    p.add_argument("--name", required=True)
    p.add_argument("--email", required=True)

    sub.add_parser("signout", help="Forget the stored session")
    sub.add_parser("whoami", help="Show the signed-in user")

    p = sub.add_parser("profile", help="Update your name and optionally your password")
    p.add_argument("--name", default=None)
    p.add_argument("--change-password", action="store_true", help="Prompt for a new password")

    p = sub.add_parser("avatar", help="Replace your profile photo")
    p.add_argument("path", nargs="?", default=None, help="Image file (prompted when omitted)")

    sub.add_parser("history", help="Show your exercise history")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(level="DEBUG" if args.debug else settings.log_level)

    store = SessionStore()
    handler = COMMANDS[args.command]
    try:
        return asyncio.run(handler(args, store))
    except NotAuthenticatedError:
        console.print("[red]Not signed in.[/red] Run `trainfit signin --email ...` first.")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
