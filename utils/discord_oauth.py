# utils/discord_oauth.py
"""
Discord OAuth2 authorization-code exchange.
"""
import logging
from typing import Any, Dict
from urllib.parse import urlencode

import requests

from config import DISCORD_CLIENT_ID, DISCORD_CLIENT_SECRET, DISCORD_REDIRECT_URI
from services.errors import AuthError

logger = logging.getLogger(__name__)

DISCORD_API = "https://discord.com/api"


def authorize_url(state: str = "") -> str:
     params = {
          "client_id": DISCORD_CLIENT_ID,
          "redirect_uri": DISCORD_REDIRECT_URI,
          "response_type": "code",
          "scope": "identify",
     }
     if state:
          params["state"] = state
     return f"{DISCORD_API}/oauth2/authorize?{urlencode(params)}"


def exchange_code(code: str, timeout: float = 10) -> Dict[str, Any]:
     """
     Trade an authorization code for the Discord user it belongs to.

     Returns {"discordId", "username", "nickname"}.

     Raises:
          AuthError: If Discord rejects the code or cannot be reached.
     """
     try:
          token_response = requests.post(
               f"{DISCORD_API}/oauth2/token",
               data={
                    "client_id": DISCORD_CLIENT_ID,
                    "client_secret": DISCORD_CLIENT_SECRET,
                    "grant_type": "authorization_code",
                    "code": code,
                    "redirect_uri": DISCORD_REDIRECT_URI,
               },
               headers={"Content-Type": "application/x-www-form-urlencoded"},
               timeout=timeout,
          )
          if token_response.status_code != 200:
               logger.warning("Discord token exchange failed: %s %s", token_response.status_code, token_response.text)
               raise AuthError("Discord authorization failed")
          access_token = token_response.json()["access_token"]

          user_response = requests.get(
               f"{DISCORD_API}/users/@me",
               headers={"Authorization": f"Bearer {access_token}"},
               timeout=timeout,
          )
     except requests.RequestException as e:
          raise AuthError(f"Discord request failed: {e}") from e

     if user_response.status_code != 200:
          raise AuthError("Could not fetch Discord profile")
     profile = user_response.json()
     return {
          "discordId": str(profile["id"]),
          "username": profile.get("username", ""),
          "nickname": profile.get("global_name") or profile.get("username", ""),
     }
