"""Tests for the Google OAuth credential store."""

import json
from datetime import datetime, timezone
from unittest.mock import MagicMock
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from frontdesk.credentials import SCOPES, TOKEN_URI, CredentialError, CredentialStore


def make_store(handler=None, token_file=None) -> CredentialStore:
    transport = httpx.MockTransport(handler) if handler else None
    return CredentialStore(
        client_id="client-id",
        client_secret="client-secret",
        redirect_uri="http://localhost:3000/api/calendar/auth/callback",
        token_file=token_file,
        transport=transport,
    )


class TestAuthorizationUrl:
    def test_requests_offline_consent(self):
        url = make_store().authorization_url(state="abc")
        query = parse_qs(urlparse(url).query)

        assert query["client_id"] == ["client-id"]
        assert query["access_type"] == ["offline"]
        assert query["prompt"] == ["consent"]
        assert query["state"] == ["abc"]
        assert query["scope"] == [" ".join(SCOPES)]

    def test_unconfigured_client(self):
        store = CredentialStore("", "", "http://localhost/cb")
        assert store.is_configured is False
        with pytest.raises(CredentialError):
            store.authorization_url()


class TestExchangeCode:
    async def test_successful_exchange(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = parse_qs(request.content.decode())
            return httpx.Response(200, json={
                "access_token": "ya29.token",
                "refresh_token": "1//refresh",
                "expires_in": 3599,
            })

        store = make_store(handler)
        await store.exchange_code("auth-code")

        assert seen["url"] == TOKEN_URI
        assert seen["body"]["code"] == ["auth-code"]
        assert seen["body"]["grant_type"] == ["authorization_code"]
        assert store.is_authenticated() is True
        creds = store.credentials()
        assert creds.token == "ya29.token"
        assert creds.refresh_token == "1//refresh"

    async def test_rejected_exchange(self):
        store = make_store(lambda request: httpx.Response(400, json={"error": "invalid_grant"}))

        with pytest.raises(CredentialError):
            await store.exchange_code("bad-code")
        assert store.is_authenticated() is False

    async def test_network_failure(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        with pytest.raises(CredentialError):
            await make_store(handler).exchange_code("auth-code")

    async def test_missing_code(self):
        with pytest.raises(CredentialError):
            await make_store().exchange_code("")


class TestTokenState:
    def test_unauthenticated_has_no_credentials(self):
        store = make_store()
        assert store.is_authenticated() is False
        assert store.credentials() is None

    def test_refresh_token_kept_across_updates(self):
        store = make_store()
        store.set_tokens({"access_token": "first", "refresh_token": "1//refresh"})
        store.set_tokens({"access_token": "second"})

        creds = store.credentials()
        assert creds.token == "second"
        assert creds.refresh_token == "1//refresh"

    def test_snapshot_unaffected_by_reauthorization(self):
        store = make_store()
        store.set_tokens({"access_token": "first"})
        snapshot = store.credentials()

        store.set_tokens({"access_token": "second"})

        assert snapshot.token == "first"
        assert store.credentials().token == "second"

    def test_empty_token_set_rejected(self):
        with pytest.raises(CredentialError):
            make_store().set_tokens({"expires_in": 3600})

    def test_clear(self):
        store = make_store()
        store.set_tokens({"access_token": "tok"})
        store.clear()
        assert store.is_authenticated() is False

    def test_tokens_persist_and_reload(self, tmp_path):
        token_file = tmp_path / "google_tokens.json"
        make_store(token_file=str(token_file)).set_tokens(
            {"access_token": "tok", "refresh_token": "1//refresh"}
        )

        assert json.loads(token_file.read_text())["refresh_token"] == "1//refresh"

        fresh = make_store(token_file=str(token_file))
        assert fresh.reload() is True
        assert fresh.credentials().token == "tok"

    def test_reload_without_file(self, tmp_path):
        assert make_store(token_file=str(tmp_path / "missing.json")).reload() is False
        assert make_store().reload() is False

    def test_reload_corrupt_file(self, tmp_path):
        token_file = tmp_path / "tokens.json"
        token_file.write_text("{not json")
        store = make_store(token_file=str(token_file))

        assert store.reload() is False
        assert store.is_authenticated() is False


class TestExpiryAndRefresh:
    def test_expires_in_sets_expiry(self):
        store = make_store()
        store.set_tokens({"access_token": "tok", "refresh_token": "1//refresh", "expires_in": 3599})

        creds = store.credentials()
        assert creds.expiry is not None
        assert creds.expiry > datetime.now(tz=timezone.utc).replace(tzinfo=None)
        assert creds.expired is False

    def test_past_expiry_marks_credentials_expired(self):
        store = make_store()
        store.set_tokens({"access_token": "tok", "expiry": "2020-01-01T00:00:00"})

        assert store.credentials().expired is True

    def test_refresh_recorded_and_persisted(self, tmp_path):
        token_file = tmp_path / "google_tokens.json"
        store = make_store(token_file=str(token_file))
        store.set_tokens({"access_token": "old", "refresh_token": "1//refresh"})
        refreshed = MagicMock(token="new", expiry=datetime(2030, 1, 1))

        store.record_refresh(refreshed, issued_token="old")

        creds = store.credentials()
        assert creds.token == "new"
        assert creds.expiry == datetime(2030, 1, 1)
        assert creds.refresh_token == "1//refresh"
        assert json.loads(token_file.read_text())["access_token"] == "new"

    def test_unchanged_token_not_recorded(self, tmp_path):
        token_file = tmp_path / "google_tokens.json"
        store = make_store(token_file=str(token_file))
        store.set_tokens({"access_token": "old"})
        token_file.unlink()

        store.record_refresh(MagicMock(token="old", expiry=None), issued_token="old")

        assert not token_file.exists()

    def test_refresh_ignored_after_reauthorization(self):
        store = make_store()
        store.set_tokens({"access_token": "old"})
        store.set_tokens({"access_token": "reauthorized"})

        store.record_refresh(MagicMock(token="refreshed", expiry=None), issued_token="old")

        assert store.credentials().token == "reauthorized"

    def test_refresh_ignored_after_clear(self):
        store = make_store()
        store.set_tokens({"access_token": "old"})
        store.clear()

        store.record_refresh(MagicMock(token="refreshed", expiry=None), issued_token="old")

        assert store.is_authenticated() is False
