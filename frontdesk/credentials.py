"""OAuth credential store for the Google Calendar integration.

The operator authorizes the calendar once, out of band, from the
dashboard. The resulting tokens live here and are shared by every call
in the process. Backend calls take a snapshot with ``credentials()`` at
call time, so re-authenticating only affects calls made afterwards.

Token lifecycle::

    store = CredentialStore(client_id, client_secret, redirect_uri)
    url = store.authorization_url()        # operator opens this
    await store.exchange_code(code)        # OAuth callback
    store.is_authenticated()               # True
    creds = store.credentials()            # google.oauth2 Credentials
    store.record_refresh(creds, issued)    # after google-auth refreshed it
"""

from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any
from urllib.parse import urlencode

import httpx
from google.oauth2.credentials import Credentials

log = logging.getLogger("frontdesk.credentials")

AUTH_URI = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URI = "https://oauth2.googleapis.com/token"
SCOPES = [
    "https://www.googleapis.com/auth/calendar",
    "https://www.googleapis.com/auth/calendar.events",
]


class CredentialError(Exception):
    """Raised when the OAuth client is misconfigured or the code exchange fails."""


class CredentialStore:
    """Holds the Google OAuth client config and the current token set."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        token_file: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._redirect_uri = redirect_uri
        self._token_file = Path(token_file) if token_file else None
        self._transport = transport
        self._tokens: dict[str, Any] | None = None
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Authorization flow
    # ------------------------------------------------------------------

    @property
    def is_configured(self) -> bool:
        return bool(self._client_id and self._client_secret)

    def authorization_url(self, state: str | None = None) -> str:
        """Build the Google consent URL the operator should visit."""
        if not self.is_configured:
            raise CredentialError(
                "Google OAuth client is not configured. "
                "Set GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET."
            )
        params = {
            "client_id": self._client_id,
            "redirect_uri": self._redirect_uri,
            "response_type": "code",
            "scope": " ".join(SCOPES),
            "access_type": "offline",
            "prompt": "consent",
        }
        if state:
            params["state"] = state
        return f"{AUTH_URI}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> dict[str, Any]:
        """Trade an authorization code for tokens and store them."""
        if not code:
            raise CredentialError("Authorization code is required")
        if not self.is_configured:
            raise CredentialError("Google OAuth client is not configured")

        data = {
            "code": code,
            "client_id": self._client_id,
            "client_secret": self._client_secret,
            "redirect_uri": self._redirect_uri,
            "grant_type": "authorization_code",
        }
        try:
            async with httpx.AsyncClient(timeout=15, transport=self._transport) as client:
                resp = await client.post(TOKEN_URI, data=data)
                resp.raise_for_status()
                tokens = resp.json()
        except httpx.HTTPStatusError as exc:
            raise CredentialError(
                f"Token exchange rejected (status {exc.response.status_code})"
            ) from exc
        except httpx.HTTPError as exc:
            raise CredentialError(f"Token exchange failed: {exc}") from exc

        self.set_tokens(tokens)
        log.info("Google Calendar authenticated")
        return tokens

    # ------------------------------------------------------------------
    # Token state
    # ------------------------------------------------------------------

    def set_tokens(self, tokens: dict[str, Any]) -> None:
        """Replace the current token set (and persist it if configured)."""
        if not tokens.get("access_token") and not tokens.get("refresh_token"):
            raise CredentialError("Token set has neither an access nor a refresh token")
        with self._lock:
            previous = self._tokens or {}
            merged = dict(tokens)
            if merged.get("expires_in") and not merged.get("expiry"):
                merged["expiry"] = _expiry_after(int(merged["expires_in"]))
            # Google only returns a refresh token on the first consent.
            if not merged.get("refresh_token") and previous.get("refresh_token"):
                merged["refresh_token"] = previous["refresh_token"]
            self._tokens = merged
        self._persist()

    def clear(self) -> None:
        with self._lock:
            self._tokens = None
        log.info("Google Calendar credentials cleared")

    def reload(self) -> bool:
        """Re-read tokens from the token file. Returns True if tokens were loaded."""
        if not self._token_file or not self._token_file.exists():
            return False
        try:
            tokens = json.loads(self._token_file.read_text())
        except (OSError, json.JSONDecodeError) as exc:
            log.warning("Could not read token file %s: %s", self._token_file, exc)
            return False
        with self._lock:
            self._tokens = tokens
        log.info("Loaded Google Calendar tokens from %s", self._token_file)
        return True

    def is_authenticated(self) -> bool:
        with self._lock:
            return self._tokens is not None

    def credentials(self) -> Credentials | None:
        """Snapshot of the current credentials, or None when unauthenticated."""
        with self._lock:
            tokens = dict(self._tokens) if self._tokens else None
        if tokens is None:
            return None
        return Credentials(
            token=tokens.get("access_token"),
            refresh_token=tokens.get("refresh_token"),
            expiry=_parse_expiry(tokens.get("expiry")),
            token_uri=TOKEN_URI,
            client_id=self._client_id,
            client_secret=self._client_secret,
            scopes=SCOPES,
        )

    def record_refresh(self, credentials: Credentials, issued_token: str | None) -> None:
        """Keep an access token that google-auth refreshed during a call.

        Ignored when the store has moved on since ``issued_token`` was
        handed out (re-authorized or cleared).
        """
        if not credentials.token or credentials.token == issued_token:
            return
        with self._lock:
            if self._tokens is None or self._tokens.get("access_token") != issued_token:
                return
            self._tokens = dict(self._tokens, access_token=credentials.token)
            if credentials.expiry is not None:
                self._tokens["expiry"] = credentials.expiry.isoformat()
        self._persist()
        log.info("Stored refreshed Google Calendar access token")

    def _persist(self) -> None:
        if not self._token_file:
            return
        with self._lock:
            tokens = dict(self._tokens or {})
        try:
            self._token_file.parent.mkdir(parents=True, exist_ok=True)
            self._token_file.write_text(json.dumps(tokens))
        except OSError as exc:
            log.warning("Could not persist tokens to %s: %s", self._token_file, exc)


# google-auth compares expiry against naive UTC time.
def _expiry_after(seconds: int) -> str:
    expiry = datetime.now(tz=timezone.utc).replace(tzinfo=None) + timedelta(seconds=seconds)
    return expiry.isoformat()


def _parse_expiry(value: Any) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value))
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
