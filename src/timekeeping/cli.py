"""Desktop agent: self-service time in/out and idle-session watch.

  timekeeping login --token TOKEN
  timekeeping clock-in --user-id 7
  timekeeping clock-out --user-id 7
  timekeeping records --user-id 7 --limit 10
  timekeeping watch [--timeout 100]
"""

from __future__ import annotations

import argparse
import asyncio
import importlib
import logging
import sys
import webbrowser
from typing import Callable, Optional, Sequence

from dotenv import load_dotenv

from .common.logging_setup import configure_logging
from .common.validators import require_positive_seconds
from .config import get_settings_module
from .container import Container, build_container
from .core.enums import MonitorState
from .core.exceptions import DomainError
from .session.input_sources import InputSource, PynputInputSource
from .session.navigation import BrowserNavigator, CallbackNavigator

log = logging.getLogger(__name__)


async def watch_session(
    container: Container,
    *,
    timeout_sec: Optional[float] = None,
    source_factory: Callable[[asyncio.AbstractEventLoop], InputSource] = PynputInputSource,
    opener: Callable[[str], bool] = webbrowser.open,
) -> MonitorState:
    """Run one activity monitor until the session is ended for inactivity."""

    loop = asyncio.get_running_loop()
    logged_out = asyncio.Event()
    browser = BrowserNavigator(container.login_url, opener=opener)

    def go_to_login(_url: str) -> None:
        browser.go_to_unauthenticated_entry()
        logged_out.set()

    source = source_factory(loop)
    monitor = container.build_monitor(
        source,
        CallbackNavigator(go_to_login, container.login_url),
        timeout_sec=timeout_sec,
        loop=loop,
    )
    try:
        with monitor:
            await logged_out.wait()
    finally:
        close = getattr(source, "close", None)
        if close is not None:
            close()
    return monitor.state


def _print_error(e: DomainError) -> int:
    print(f"[{e.kind.value}] {e}", file=sys.stderr)
    return 1


def _cmd_login(container: Container, args) -> int:
    container.credentials.save(args.token)
    print("Session started.")
    return 0


def _cmd_logout(container: Container, args) -> int:
    container.credentials.clear_credential()
    print("Logged out.")
    return 0


def _cmd_clock_in(container: Container, args) -> int:
    try:
        record = container.attendance_service.clock_in(args.user_id)
    except DomainError as e:
        return _print_error(e)
    print(f"Time in recorded: {record.time_in:%Y-%m-%d %H:%M:%S}")
    return 0


def _cmd_clock_out(container: Container, args) -> int:
    try:
        record = container.attendance_service.clock_out(args.user_id)
    except DomainError as e:
        return _print_error(e)
    print(f"Time out recorded: {record.time_out:%Y-%m-%d %H:%M:%S}")
    return 0


def _cmd_records(container: Container, args) -> int:
    try:
        rows = container.attendance_service.get_history_ui(args.user_id, limit=args.limit)
    except DomainError as e:
        return _print_error(e)
    if not rows:
        print("No records yet.")
    for row in rows:
        print(f"{row['date']}  in {row['time_in']}  out {row['time_out']}")
    return 0


def _cmd_watch(container: Container, args) -> int:
    if not container.credentials.has_credential():
        print("No active session. Run `timekeeping login --token ...` first.", file=sys.stderr)
        return 1
    try:
        timeout = require_positive_seconds(args.timeout, "--timeout") if args.timeout is not None else None
        state = asyncio.run(watch_session(container, timeout_sec=timeout))
    except DomainError as e:
        return _print_error(e)
    except KeyboardInterrupt:
        print("\nWatch stopped by user.")
        return 0
    return 0 if state is MonitorState.EXPIRED else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="timekeeping", description="Attendance time in/out and idle-session watch")
    parser.add_argument("--settings", help="settings module (default: from APP_ENV)")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("login", help="store the access token for this device")
    p.add_argument("--token", required=True)
    p.set_defaults(handler=_cmd_login)

    p = sub.add_parser("logout", help="remove the stored access token")
    p.set_defaults(handler=_cmd_logout)

    for name, handler, help_text in (
        ("clock-in", _cmd_clock_in, "record time in for today"),
        ("clock-out", _cmd_clock_out, "record time out for today"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("--user-id", type=int, required=True)
        p.set_defaults(handler=handler)

    p = sub.add_parser("records", help="show time records, newest first")
    p.add_argument("--user-id", type=int, required=True)
    p.add_argument("--limit", type=int, default=None)
    p.set_defaults(handler=_cmd_records)

    p = sub.add_parser("watch", help="log out automatically after inactivity")
    p.add_argument("--timeout", type=float, default=None, help="quiet period in seconds")
    p.set_defaults(handler=_cmd_watch)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv(override=False)
    args = build_parser().parse_args(argv)

    settings = importlib.import_module(args.settings or get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"), getattr(settings, "LOG_FILE", "") or None)

    container = build_container(settings)
    return args.handler(container, args)


if __name__ == "__main__":
    sys.exit(main())
