# tests/test_auth.py
from unittest.mock import MagicMock, patch

import pytest
from jose import jwt

from config import JWT_ALGORITHM, JWT_SECRET
from services.errors import AuthError
from utils import discord_oauth
from utils.security import create_access_token, decode_token, hash_password, verify_password


def test_password_hashing():
     hashed = hash_password("s3cret!")
     assert hashed != "s3cret!"
     assert verify_password("s3cret!", hashed)
     assert not verify_password("nope", hashed)
     assert not verify_password("s3cret!", "")
     assert not verify_password("s3cret!", "plain-text")


def test_token_round_trip():
     token = create_access_token({"discordId": "1", "role": "Admin"})
     payload = decode_token(token)
     assert payload["discordId"] == "1"
     assert payload["role"] == "Admin"
     assert jwt.get_unverified_header(token)["alg"] == JWT_ALGORITHM


def test_expired_token_rejected():
     token = create_access_token({"discordId": "1"}, expires_hours=-1)
     with pytest.raises(jwt.ExpiredSignatureError):
          decode_token(token)


def test_foreign_token_rejected():
     token = jwt.encode({"discordId": "1"}, JWT_SECRET + "x", algorithm=JWT_ALGORITHM)
     with pytest.raises(jwt.JWTError):
          decode_token(token)


def _response(status_code, payload):
     response = MagicMock(status_code=status_code, text="")
     response.json.return_value = payload
     return response


@patch("utils.discord_oauth.requests.get")
@patch("utils.discord_oauth.requests.post")
def test_exchange_code(mock_post, mock_get):
     mock_post.return_value = _response(200, {"access_token": "abc"})
     mock_get.return_value = _response(200, {"id": 42, "username": "ali", "global_name": "Ali"})

     profile = discord_oauth.exchange_code("code-1")

     assert profile == {"discordId": "42", "username": "ali", "nickname": "Ali"}
     assert mock_post.call_args[1]["data"]["code"] == "code-1"
     assert mock_get.call_args[1]["headers"] == {"Authorization": "Bearer abc"}


@patch("utils.discord_oauth.requests.post")
def test_exchange_code_rejected(mock_post):
     mock_post.return_value = _response(400, {"error": "invalid_grant"})
     with pytest.raises(AuthError):
          discord_oauth.exchange_code("bad")


def test_authorize_url():
     url = discord_oauth.authorize_url("xyz")
     assert url.startswith("https://discord.com/api/oauth2/authorize?")
     assert "scope=identify" in url
     assert "state=xyz" in url
