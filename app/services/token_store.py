import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class TokenStore:
    """File-backed holder for the linked Google account's OAuth2 tokens.

    All writers go through ``lock`` so a refresh in one request cannot
    interleave with a save or clear from another.
    """

    def __init__(self, path: str):
        self.path = Path(path)
        self.lock = asyncio.Lock()
        self._tokens: Dict[str, Any] = {}

    @property
    def tokens(self) -> Dict[str, Any]:
        return dict(self._tokens)

    def has_tokens(self) -> bool:
        return bool(self._tokens.get("access_token") or self._tokens.get("refresh_token"))

    def load(self) -> Dict[str, Any]:
        """Read tokens from disk into memory; a missing file means unlinked"""
        if not self.path.exists():
            logger.info(f"No saved Google tokens at {self.path}")
            self._tokens = {}
            return {}

        with self.path.open("r", encoding="utf-8") as token_file:
            data = json.load(token_file)
        if not isinstance(data, dict):
            raise ValueError(f"Token file {self.path} does not contain a JSON object")

        self._tokens = data
        logger.info("Loaded saved Google tokens")
        return self.tokens

    def save(self, tokens: Dict[str, Any]) -> None:
        """Merge and persist tokens; a missing refresh_token keeps the stored one"""
        merged = dict(self._tokens)
        merged.update({key: value for key, value in tokens.items() if value is not None})

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as token_file:
            json.dump(merged, token_file, indent=2)
        os.replace(tmp_path, self.path)

        self._tokens = merged
        logger.info("Google tokens saved to disk")

    def clear(self) -> None:
        self._tokens = {}
        if self.path.exists():
            self.path.unlink()
            logger.info("Saved Google tokens removed")

    def info(self) -> Dict[str, Any]:
        return {
            "googleLinked": self.has_tokens(),
            "hasAccessToken": bool(self._tokens.get("access_token")),
            "hasRefreshToken": bool(self._tokens.get("refresh_token")),
            "expiryDate": self._tokens.get("expiry"),
        }

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        return self._tokens.get(key, default)
