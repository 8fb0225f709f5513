"""Example: using the service layer directly (no Flask, no CLI)."""

import importlib

from timekeeping.config import get_settings_module
from timekeeping.container import build_container
from timekeeping.core.exceptions import AlreadyClockedIn


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(settings)
    service = container.attendance_service

    try:
        service.clock_in(user_id=1)
    except AlreadyClockedIn as e:
        print(e)
    print(service.get_history_ui(user_id=1, limit=5))


if __name__ == "__main__":
    main()
