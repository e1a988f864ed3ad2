import asyncio
import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken
from google.oauth2.credentials import Credentials

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/calendar.events",
    "https://www.googleapis.com/auth/calendar.readonly",
]


class GoogleAuthStore:
    """OAuth tokens for the single local user, Fernet-encrypted in a JSON file."""

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path or os.getenv("GOOGLE_TOKEN_PATH", "data/google_token.json"))

        # Generate a key if not provided (for development/testing only).
        # Tokens written with a temporary key cannot be read after a restart.
        key = os.getenv("GOOGLE_TOKEN_ENCRYPTION_KEY")
        if not key:
            logger.warning(
                "GOOGLE_TOKEN_ENCRYPTION_KEY not set. Generating a temporary key."
            )
            key = Fernet.generate_key().decode()

        try:
            self.fernet = Fernet(key.encode() if isinstance(key, str) else key)
        except ValueError as e:
            logger.error(f"Invalid encryption key: {e}")
            self.fernet = Fernet(Fernet.generate_key())

    def _encrypt(self, data: Optional[str]) -> Optional[str]:
        if not data:
            return None
        return self.fernet.encrypt(data.encode()).decode()

    def _decrypt(self, token: Optional[str]) -> Optional[str]:
        if not token:
            return None
        try:
            return self.fernet.decrypt(token.encode()).decode()
        except InvalidToken:
            logger.error("Failed to decrypt stored Google token")
            return None

    def _read(self) -> Optional[dict]:
        if not self.path.exists():
            return None
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except ValueError as e:
            logger.error(f"Stored Google token file is corrupted: {e}")
            return None

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    async def save_credentials(self, credentials: Credentials, email: Optional[str] = None) -> None:
        """Store OAuth tokens (encrypted)."""
        existing = await asyncio.to_thread(self._read) or {}

        record = {
            "access_token": self._encrypt(credentials.token),
            # Google only returns a refresh token on first consent; keep the old one.
            "refresh_token": self._encrypt(credentials.refresh_token)
            if credentials.refresh_token
            else existing.get("refresh_token"),
            "token_expiry": credentials.expiry.isoformat() if credentials.expiry else None,
            "email": email or existing.get("email"),
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        await asyncio.to_thread(self._write, record)
        logger.info("Saved Google credentials")

    async def get_credentials(self) -> Optional[Credentials]:
        """Rebuild Credentials from the stored tokens; google-auth refreshes on use."""
        row = await asyncio.to_thread(self._read)
        if not row:
            return None

        access_token = self._decrypt(row.get("access_token"))
        refresh_token = self._decrypt(row.get("refresh_token"))
        if not access_token:
            return None

        expiry = None
        if row.get("token_expiry"):
            expiry = datetime.fromisoformat(row["token_expiry"])
            # google-auth expects naive UTC
            if expiry.tzinfo:
                expiry = expiry.astimezone(timezone.utc).replace(tzinfo=None)

        return Credentials(
            token=access_token,
            refresh_token=refresh_token,
            token_uri="https://oauth2.googleapis.com/token",
            client_id=os.getenv("GOOGLE_CLIENT_ID"),
            client_secret=os.getenv("GOOGLE_CLIENT_SECRET"),
            scopes=SCOPES,
            expiry=expiry,
        )

    async def get_email(self) -> Optional[str]:
        row = await asyncio.to_thread(self._read)
        return row.get("email") if row else None

    async def delete_credentials(self) -> None:
        await asyncio.to_thread(self.path.unlink, True)
        logger.info("Deleted Google credentials")
