# utils/google_auth.py
"""
Service-account access tokens for the Google Sheets API.

A signed RS256 assertion is exchanged at Google's OAuth token endpoint for a
short-lived bearer token, which is reused until shortly before it expires.
"""
import json
import logging
import os
import time
from typing import Dict, Optional

import requests
from jose import jwt

from services.errors import StoreUnavailable

logger = logging.getLogger(__name__)

TOKEN_URL = "https://oauth2.googleapis.com/token"
SHEETS_SCOPE = "https://www.googleapis.com/auth/spreadsheets"


def load_service_account(raw_json: str = "", path: str = "") -> Dict[str, str]:
     """
     Load service-account credentials from a JSON string or a file path.

     Newlines inside private_key are often escaped as ``\\n`` when pasted into
     environment variables; both forms are accepted.

     Raises:
          ValueError: If no credentials are configured or they are incomplete.
     """
     if raw_json:
          try:
               account = json.loads(raw_json, strict=False)
          except json.JSONDecodeError as e:
               raise ValueError(
                    "Invalid GOOGLE_SHEETS_SERVICE_ACCOUNT_JSON. Make sure newlines in private_key are escaped as \\n"
               ) from e
     elif path:
          if not os.path.exists(path):
               raise ValueError(f"Google Sheets service account file not found at: {path}")
          with open(path, "r", encoding="utf-8") as fh:
               account = json.load(fh)
     else:
          raise ValueError(
               "Google Sheets credentials not configured. Set GOOGLE_SHEETS_SERVICE_ACCOUNT_JSON "
               "or GOOGLE_SHEETS_SERVICE_ACCOUNT_PATH"
          )

     if not account.get("client_email") or not account.get("private_key"):
          raise ValueError("Invalid service account JSON. Missing client_email or private_key")
     account["private_key"] = account["private_key"].replace("\\n", "\n")
     return account


class ServiceAccountAuth:
     """Mints and caches OAuth access tokens for one service account."""

     def __init__(self, account: Dict[str, str], scope: str = SHEETS_SCOPE, timeout: float = 15):
          self._account = account
          self._scope = scope
          self._timeout = timeout
          self._token: Optional[str] = None
          self._expires_at = 0.0

     def _assertion(self, now: int) -> str:
          claims = {
               "iss": self._account["client_email"],
               "scope": self._scope,
               "aud": self._account.get("token_uri", TOKEN_URL),
               "iat": now,
               "exp": now + 3600,
          }
          return jwt.encode(claims, self._account["private_key"], algorithm="RS256")

     def token(self) -> str:
          """Return a valid access token, refreshing it when close to expiry."""
          now = int(time.time())
          if self._token and now < self._expires_at - 60:
               return self._token

          try:
               response = requests.post(
                    self._account.get("token_uri", TOKEN_URL),
                    data={
                         "grant_type": "urn:ietf:params:oauth:grant-type:jwt-bearer",
                         "assertion": self._assertion(now),
                    },
                    timeout=self._timeout,
               )
          except requests.RequestException as e:
               raise StoreUnavailable("Google token exchange failed", original_error=e) from e

          if response.status_code != 200:
               raise StoreUnavailable(f"Google token exchange failed: {response.status_code} {response.text}")

          data = response.json()
          self._token = data["access_token"]
          self._expires_at = now + int(data.get("expires_in", 3600))
          logger.debug("Refreshed Google access token for %s", self._account["client_email"])
          return self._token

     def headers(self) -> Dict[str, str]:
          return {"Authorization": f"Bearer {self.token()}"}
