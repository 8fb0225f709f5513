from __future__ import annotations

import logging

from ..core.constants import LOGOUT_NOTICE
from ..core.enums import NoticeKind
from .credentials import CredentialStore
from .navigation import Navigator
from .notifier import Notifier

log = logging.getLogger(__name__)


class SessionTerminator:
    """Ends the authenticated session after inactivity.

    Clears the credential, tells the user why, and navigates to the login
    entry. Repeated calls are harmless: the notice is shown once, later calls
    only re-navigate. A credential store that fails to clear is logged; the
    notice and navigation still happen.
    """

    def __init__(self, credentials: CredentialStore, notifier: Notifier, navigator: Navigator):
        self._credentials = credentials
        self._notifier = notifier
        self._navigator = navigator
        self._terminated = False

    @property
    def terminated(self) -> bool:
        return self._terminated

    def terminate(self) -> None:
        try:
            if self._credentials.has_credential():
                self._credentials.clear_credential()
        except Exception:
            log.exception("Failed to clear stored credential during logout")

        if not self._terminated:
            self._terminated = True
            log.info("Session terminated after inactivity")
            self._notifier.notify(LOGOUT_NOTICE, NoticeKind.INFO)

        self._navigator.go_to_unauthenticated_entry()
