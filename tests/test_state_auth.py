"""Tests for session state, the client state file and placeholder login."""

import asyncio
from uuid import uuid4

from bizmanager.activity import ActivityLogger
from bizmanager.auth import PlaceholderAuth
from bizmanager.config import AuthSettings
from bizmanager.models.activity import ActivityEventType
from bizmanager.state import AppState, ClientState, ClientStateStore


class TestAppState:
    """Tests for lookups over loaded directory data."""

    def test_name_lookups(self, amit, mumbai):
        state = AppState()
        state.set_accounts([amit])
        state.set_locations([mumbai])
        assert state.get_account_name(amit.id) == "Amit Patel"
        assert state.get_location_name(mumbai.id) == "Mumbai Branch"

    def test_unknown_fallbacks(self):
        """Test the fallback names for ids not loaded."""
        state = AppState()
        assert state.get_account_name(uuid4()) == "Unknown Account"
        assert state.get_location_name(None) == "Unknown Location"

    def test_find_by_name_is_exact(self, amit, neha):
        state = AppState(accounts=[amit, neha])
        assert state.find_account_by_name("Neha Joshi") is neha
        assert state.find_account_by_name("neha joshi") is None

    def test_find_location_by_name(self, mumbai, delhi):
        """Test the lookup the CSV importer uses for Location Name."""
        state = AppState(locations=[mumbai, delhi])
        assert state.find_location_by_name("Delhi Branch") is delhi
        assert state.find_location_by_name("Delhi") is None

    def test_selected_location(self, mumbai):
        state = AppState()
        state.set_selected_location(mumbai.id)
        assert state.selected_location_id == mumbai.id


class TestClientStateStore:
    """Tests for the persisted client state."""

    def test_missing_file_is_default(self, tmp_path):
        store = ClientStateStore(str(tmp_path / "state.json"))
        assert store.load() == ClientState()

    def test_corrupt_file_is_default(self, tmp_path):
        """Test that unreadable JSON doesn't raise."""
        path = tmp_path / "state.json"
        path.write_text("{not json", encoding="utf-8")
        assert ClientStateStore(str(path)).load() == ClientState()

    def test_storage_overrides_persist(self, tmp_path):
        """Test that overrides survive a new store instance."""
        path = str(tmp_path / "state.json")
        ClientStateStore(path).set_storage_overrides("/secrets/sa.json", "sheet-123")

        state = ClientStateStore(path).load()
        assert state.storage_credentials_path == "/secrets/sa.json"
        assert state.storage_spreadsheet_id == "sheet-123"

    def test_clear_overrides_keeps_login(self, tmp_path):
        store = ClientStateStore(str(tmp_path / "state.json"))
        store.update(is_authenticated=True)
        store.set_storage_overrides("/secrets/sa.json", "")
        assert store.load().storage_spreadsheet_id is None

        store.clear_storage_overrides()
        state = store.load()
        assert state.storage_credentials_path is None
        assert state.is_authenticated is True


class TestPlaceholderAuth:
    """Tests for the login gate."""

    def _auth(self, tmp_path, activity_logger=None):
        store = ClientStateStore(str(tmp_path / "state.json"))
        settings = AuthSettings(username="admin", password="secret")
        return PlaceholderAuth(store, settings, activity_logger)

    def test_login_success_persists(self, tmp_path):
        auth = self._auth(tmp_path)
        assert asyncio.run(auth.login("admin", "secret")) is True
        assert auth.is_authenticated
        assert self._auth(tmp_path).is_authenticated

    def test_login_failure(self, tmp_path):
        activity_logger = ActivityLogger()
        auth = self._auth(tmp_path, activity_logger)
        assert asyncio.run(auth.login("admin", "wrong")) is False
        assert not auth.is_authenticated
        assert activity_logger.recent[-1].event_type == ActivityEventType.LOGIN_FAILED

    def test_logout(self, tmp_path):
        activity_logger = ActivityLogger()
        auth = self._auth(tmp_path, activity_logger)
        asyncio.run(auth.login("admin", "secret"))
        asyncio.run(auth.logout())
        assert not auth.is_authenticated
        assert activity_logger.recent[-1].event_type == ActivityEventType.LOGOUT
