"""
Placeholder authentication.

This is NOT real authentication. It compares against the configured
username and password and keeps a flag in the client state file.
"""

from typing import Optional

from bizmanager.activity import ActivityLogger
from bizmanager.config import AuthSettings, get_settings
from bizmanager.state import ClientStateStore


class PlaceholderAuth:

    def __init__(
        self,
        store: ClientStateStore,
        settings: Optional[AuthSettings] = None,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._store = store
        self._settings = settings or get_settings().auth
        self._activity = activity_logger or ActivityLogger()

    @property
    def is_authenticated(self) -> bool:
        return self._store.load().is_authenticated

    async def login(self, username: str, password: str) -> bool:
        """Returns True and persists the flag when the credentials match."""
        ok = (
            username == self._settings.username
            and password == self._settings.password
        )
        if ok:
            self._store.update(is_authenticated=True)
        await self._activity.log_login(username, ok)
        return ok

    async def logout(self) -> None:
        self._store.update(is_authenticated=False)
        await self._activity.log_logout()
