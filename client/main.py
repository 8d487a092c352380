#!/usr/bin/env python3
"""
Registration Portal CLI - Main Entry Point

Usage:
    registration-portal register                      # Interactive registration form
    registration-portal register --data '{...}'       # Submit JSON directly
    registration-portal admin list --search asha      # List / search / filter
    registration-portal admin watch                   # Live dashboard
    registration-portal admin delete <id>             # Delete a registration
    registration-portal admin stats                   # Per-service counts
"""

import argparse
import asyncio
import json
import sys
from typing import Optional, List

from rich.console import Console
from rich.prompt import Prompt, Confirm

from client.admin_dashboard import AdminDashboard
from client.api import ApiError, RegistrationApi
from client.auth import AuthenticationError, StaticCredentialAuthenticator
from client.config import ClientConfig
from client.live_updates import LiveUpdateListener
from client.registration_form import RegistrationForm, prompt_for_registration
from client.renderer import (
    render_dashboard,
    render_field_errors,
    render_registration,
    render_stats,
)

console = Console()


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI"""
    parser = argparse.ArgumentParser(
        prog="registration-portal",
        description="Submit project registrations and manage them from the terminal",
    )
    parser.add_argument("--config", help="Path to a JSON client config file")
    parser.add_argument("--api-url", help="API base URL (default http://localhost:8000/api/v1)")
    parser.add_argument("--ws-url", help="Realtime websocket URL (default ws://localhost:8000/ws)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    register = subparsers.add_parser("register", help="Submit a registration")
    register.add_argument("--data", help="Registration as a JSON object (camelCase keys)")

    admin = subparsers.add_parser("admin", help="Admin dashboard commands")
    admin.add_argument("--username", help="Admin username (default from config)")
    admin_sub = admin.add_subparsers(dest="admin_command", required=True)

    list_cmd = admin_sub.add_parser("list", help="List registrations")
    list_cmd.add_argument("--page", type=int, default=1)
    list_cmd.add_argument("--page-size", type=int)
    list_cmd.add_argument("--search", default="")
    list_cmd.add_argument("--service", default="All")

    watch_cmd = admin_sub.add_parser("watch", help="Show registrations and follow live updates")
    watch_cmd.add_argument("--search", default="")
    watch_cmd.add_argument("--service", default="All")

    delete_cmd = admin_sub.add_parser("delete", help="Delete a registration")
    delete_cmd.add_argument("registration_id")
    delete_cmd.add_argument("-y", "--yes", action="store_true", help="Skip confirmation")

    admin_sub.add_parser("stats", help="Registrations per service")

    return parser


def load_config(args: argparse.Namespace) -> ClientConfig:
    config = ClientConfig.load(args.config)
    if args.api_url:
        config.api_base_url = args.api_url
    if args.ws_url:
        config.ws_url = args.ws_url
    return config


async def run_register(config: ClientConfig, data_json: Optional[str]) -> int:
    async with RegistrationApi(config) as api:
        form = RegistrationForm(api)

        if data_json:
            try:
                data = json.loads(data_json)
            except json.JSONDecodeError as e:
                console.print(f"[red]--data is not valid JSON: {e}[/red]")
                return 2
        else:
            try:
                await form.load_catalog()
            except ApiError as e:
                console.print(f"[yellow]Could not load the service catalog: {e.message}[/yellow]")
            data = prompt_for_registration(console, form)

        result = await form.submit(data)

    if not result.success:
        render_field_errors(console, result.message, result.field_errors)
        return 1

    console.print(f"[green]✓ {result.message}[/green]")
    render_registration(console, result.registration)
    return 0


async def run_admin(config: ClientConfig, args: argparse.Namespace) -> int:
    async with RegistrationApi(config) as api:
        dashboard = AdminDashboard(api)

        if args.admin_command == "list":
            if args.page_size:
                dashboard.page_size = args.page_size
            dashboard.search = args.search.strip()
            dashboard.service_filter = args.service
            await dashboard.fetch(args.page)
            render_dashboard(console, dashboard)
            return 1 if dashboard.error else 0

        if args.admin_command == "stats":
            try:
                render_stats(console, await api.registration_stats())
            except ApiError as e:
                console.print(f"[red]{e.message}[/red]")
                return 1
            return 0

        if args.admin_command == "delete":
            if not args.yes and not Confirm.ask(
                f"Delete registration {args.registration_id}?", console=console
            ):
                return 0
            if await dashboard.delete(args.registration_id):
                console.print("[green]✓ Registration deleted[/green]")
                return 0
            console.print(f"[red]{dashboard.error}[/red]")
            return 1

        if args.admin_command == "watch":
            return await run_watch(config, dashboard, args)

    return 2


async def run_watch(config: ClientConfig, dashboard: AdminDashboard, args: argparse.Namespace) -> int:
    dashboard.search = args.search.strip()
    dashboard.service_filter = args.service
    await dashboard.fetch(1)
    render_dashboard(console, dashboard)

    async def on_event(message):
        if dashboard.apply_live_event(message):
            data = message.get("data") or {}
            console.print(f"[green]New registration:[/green] {data.get('fullName')} ({data.get('service')})")
            render_dashboard(console, dashboard)

    async def on_connected(reconnect: bool):
        if reconnect:
            # Pushes sent while offline are not redelivered
            await dashboard.refresh()
            render_dashboard(console, dashboard)
        console.print("[dim]Listening for new registrations (Ctrl+C to stop)[/dim]")

    listener = LiveUpdateListener(config, on_event=on_event, on_connected=on_connected, console=console)
    try:
        await listener.run()
    except asyncio.CancelledError:
        listener.stop()
    return 1 if listener.status == "failed" else 0


def authenticate_admin(config: ClientConfig, username: Optional[str]) -> None:
    authenticator = StaticCredentialAuthenticator.from_config(config)
    user = username or config.admin_username
    password = Prompt.ask(f"Password for {user}", password=True, console=console)
    authenticator.require(user, password)


def main(argv: Optional[List[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)
    config = load_config(args)

    try:
        if args.command == "register":
            return asyncio.run(run_register(config, args.data))

        authenticate_admin(config, args.username)
        return asyncio.run(run_admin(config, args))
    except AuthenticationError as e:
        console.print(f"[red]{e}[/red]")
        return 1
    except KeyboardInterrupt:
        console.print("\n[dim]Interrupted[/dim]")
        return 130


def run() -> None:
    """Console script entry point"""
    sys.exit(main())


if __name__ == "__main__":
    run()
