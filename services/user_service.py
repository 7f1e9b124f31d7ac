# services/user_service.py
"""
User Service - accounts and roles keyed by Discord id.

Roles are cached in the user-role namespace; any change to an account's role
(or its deletion) invalidates that entry.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

from config import DEFAULT_ADMINS, ROLES
from services.cache_service import CacheLayer
from services.column_schema import USERS
from services.errors import AuthError, Conflict, Forbidden, NotFound, ValidationError
from services.row_store import RowStoreAdapter
from utils.formatting import format_timestamp
from utils.security import hash_password, verify_password

logger = logging.getLogger(__name__)

PUBLIC_FIELDS = ("discordId", "role", "createdAt", "updatedAt", "nickname", "username")


class UserService:
     def __init__(self, store: RowStoreAdapter, cache: CacheLayer, default_admins: Sequence[str] = DEFAULT_ADMINS, schema=USERS):
          self._store = store
          self._cache = cache
          self._default_admins = {str(discord_id).strip() for discord_id in default_admins}
          self._schema = schema

     def _public(self, row) -> Dict[str, str]:
          record = self._schema.to_record(row)
          return {name: str(record[name]).strip() for name in PUBLIC_FIELDS}

     def _find(self, discord_id: str):
          return self._store.find_row(self._schema, "discordId", str(discord_id).strip())

     def _require(self, discord_id: str):
          found = self._find(discord_id)
          if found is None:
               raise NotFound(f"User {discord_id} not found", field="discordId")
          return found

     @staticmethod
     def _check_role(role: str) -> str:
          if role not in ROLES:
               raise ValidationError(f"Invalid role. Must be one of: {', '.join(ROLES)}", field="role")
          return role

     # ------------------------------------------------------------------
     # Reads
     # ------------------------------------------------------------------

     def get_user(self, discord_id: str) -> Optional[Dict[str, str]]:
          found = self._find(discord_id)
          if found is None:
               return None
          user = self._public(found[1])
          self._cache.user_role.set(user["discordId"], user["role"])
          return user

     def list_users(self) -> List[Dict[str, str]]:
          return [
               self._public(row)
               for row in self._store.list_rows(self._schema)
               if str(row[self._schema.offset("discordId")]).strip()
          ]

     def get_role(self, discord_id: str) -> Optional[str]:
          discord_id = str(discord_id).strip()
          cached = self._cache.user_role.get(discord_id)
          if cached is not None:
               return cached
          user = self.get_user(discord_id)
          return user["role"] if user else None

     def is_admin(self, discord_id: str) -> bool:
          return self.get_role(discord_id) == "Admin"

     def get_nickname(self, discord_id: str) -> str:
          """Display name for audit entries and webhooks; the raw id when no nickname is set."""
          user = self.get_user(discord_id)
          if user and user["nickname"]:
               return user["nickname"]
          return str(discord_id) or "Unknown"

     # ------------------------------------------------------------------
     # Writes
     # ------------------------------------------------------------------

     def create_user(self, discord_id: str, role: str = "User", nickname: str = "") -> Dict[str, str]:
          discord_id = str(discord_id or "").strip()
          if not discord_id:
               raise ValidationError("discordId is required", field="discordId")
          self._check_role(role)
          if self._find(discord_id) is not None:
               raise Conflict(f"User {discord_id} already exists", field="discordId")

          now = format_timestamp()
          self._store.append_row(self._schema, self._schema.to_buffer({
               "discordId": discord_id,
               "role": role,
               "createdAt": now,
               "updatedAt": now,
               "nickname": (nickname or "").strip(),
          }))
          self._cache.user_role.set(discord_id, role)
          logger.info("Created user %s with role %s", discord_id, role)
          return self.get_user(discord_id)

     def update_role(self, discord_id: str, role: str) -> Dict[str, str]:
          self._check_role(role)
          index, _ = self._require(discord_id)
          self._store.update_cells(self._schema, index, {
               self._schema.offset("role"): role,
               self._schema.offset("updatedAt"): format_timestamp(),
          })
          self._cache.user_role.invalidate(str(discord_id).strip())
          logger.info("User %s role set to %s", discord_id, role)
          return self.get_user(discord_id)

     def update_nickname(self, discord_id: str, nickname: str) -> Dict[str, str]:
          index, _ = self._require(discord_id)
          self._store.update_cells(self._schema, index, {
               self._schema.offset("nickname"): (nickname or "").strip(),
               self._schema.offset("updatedAt"): format_timestamp(),
          })
          return self.get_user(discord_id)

     def update_credentials(self, discord_id: str, username: Optional[str] = None, password: Optional[str] = None) -> Dict[str, str]:
          """
          Set the secondary login for an account. Usernames are unique
          (case-insensitive); passwords are stored as bcrypt hashes.
          """
          index, _ = self._require(discord_id)
          cells: Dict[int, Any] = {}

          if username is not None:
               username = username.strip()
               if not username:
                    raise ValidationError("username cannot be empty", field="username")
               owner = self._find_by_username(username)
               if owner is not None and owner[0] != index:
                    raise Conflict("Username already taken", field="username")
               cells[self._schema.offset("username")] = username

          if password is not None:
               if len(password) < 6:
                    raise ValidationError("Password must be at least 6 characters", field="password")
               cells[self._schema.offset("password")] = hash_password(password)

          if not cells:
               raise ValidationError("Nothing to update: provide username and/or password")
          cells[self._schema.offset("updatedAt")] = format_timestamp()
          self._store.update_cells(self._schema, index, cells)
          logger.info("Updated credentials for %s", discord_id)
          return self.get_user(discord_id)

     def delete_user(self, discord_id: str) -> None:
          index, _ = self._require(discord_id)
          self._store.delete_row(self._schema, index)
          self._cache.user_role.invalidate(str(discord_id).strip())
          logger.info("Deleted user %s", discord_id)

     # ------------------------------------------------------------------
     # Login
     # ------------------------------------------------------------------

     def resolve_login(self, discord_id: str, nickname: str = "") -> Dict[str, str]:
          """
          Account for a Discord login.

          Existing accounts log in as they are. Ids on the default-admin list
          are created as Admin, and so is the very first account. Anyone else
          is refused.

          Raises:
               Forbidden: For unknown ids when accounts already exist.
          """
          discord_id = str(discord_id).strip()
          user = self.get_user(discord_id)
          if user is not None:
               return user
          if discord_id in self._default_admins:
               logger.info("Creating default admin %s", discord_id)
               return self.create_user(discord_id, "Admin", nickname)
          if not self.list_users():
               logger.info("No accounts yet, %s becomes the first Admin", discord_id)
               return self.create_user(discord_id, "Admin", nickname)
          raise Forbidden("User not authorized. Please contact an administrator.", field="discordId")

     def _find_by_username(self, username: str):
          wanted = username.strip().lower()
          if not wanted:
               return None
          offset = self._schema.offset("username")
          for index, row in enumerate(self._store.list_rows(self._schema)):
               if str(row[offset]).strip().lower() == wanted:
                    return index, row
          return None

     def authenticate(self, username: str, password: str) -> Dict[str, str]:
          """
          Raises:
               AuthError: Unknown username or wrong password (same message for both).
          """
          found = self._find_by_username(username or "")
          if found is None or not verify_password(password or "", str(found[1][self._schema.offset("password")])):
               raise AuthError("Invalid credentials")
          return self._public(found[1])
