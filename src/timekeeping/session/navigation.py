from __future__ import annotations

import logging
import webbrowser
from typing import Callable, Protocol

from ..core.constants import DEFAULT_LOGIN_URL

log = logging.getLogger(__name__)


class Navigator(Protocol):
    def go_to_unauthenticated_entry(self) -> None:
        raise NotImplementedError


class CallbackNavigator(Navigator):
    """Hands the login URL to a host callback (router, window, test spy)."""

    def __init__(self, callback: Callable[[str], None], login_url: str = DEFAULT_LOGIN_URL):
        self._callback = callback
        self._login_url = login_url

    def go_to_unauthenticated_entry(self) -> None:
        self._callback(self._login_url)


class BrowserNavigator(Navigator):
    def __init__(self, login_url: str, *, opener: Callable[[str], bool] = webbrowser.open):
        self._login_url = login_url
        self._opener = opener

    def go_to_unauthenticated_entry(self) -> None:
        log.info("Opening login page %s", self._login_url)
        if not self._opener(self._login_url):
            log.warning("No browser available to open %s", self._login_url)
