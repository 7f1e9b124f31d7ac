# services/seller_service.py
"""
Seller Info - bank and wallet details per Discord id.

A profile is created on first save and updated in place afterwards; no
history is kept. Reads go through the seller-info cache namespace.
"""
import logging
from typing import Any, Dict, List, Optional

from services.cache_service import CacheLayer
from services.column_schema import SELLER_INFO
from services.errors import ValidationError
from services.row_store import RowStoreAdapter

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("card", "sheba", "name", "phone", "wallet", "paypalWallet")


class SellerService:
     def __init__(self, store: RowStoreAdapter, cache: CacheLayer, schema=SELLER_INFO):
          self._store = store
          self._cache = cache
          self._schema = schema

     def _to_profile(self, row) -> Dict[str, str]:
          record = self._schema.to_record(row)
          return {name: str(value).strip() for name, value in record.items()}

     def get(self, discord_id: str) -> Optional[Dict[str, str]]:
          """Profile for one seller, or None. Misses are not cached."""
          discord_id = str(discord_id).strip()
          cached = self._cache.seller_info.get(discord_id)
          if cached is not None:
               return cached

          found = self._store.find_row(self._schema, "discordId", discord_id)
          if found is None:
               return None
          profile = self._to_profile(found[1])
          self._cache.seller_info.set(discord_id, profile)
          return profile

     def list(self) -> List[Dict[str, str]]:
          return [
               self._to_profile(row)
               for row in self._store.list_rows(self._schema)
               if str(row[self._schema.offset("discordId")]).strip()
          ]

     def save(self, discord_id: str, profile: Dict[str, Any]) -> Dict[str, str]:
          """
          Create or update a profile. Only known profile fields present in
          ``profile`` are written on update.
          """
          discord_id = str(discord_id or "").strip()
          if not discord_id:
               raise ValidationError("discordId is required", field="discordId")

          values = {
               name: ("" if profile[name] is None else str(profile[name]).strip())
               for name in PROFILE_FIELDS
               if name in profile
          }

          found = self._store.find_row(self._schema, "discordId", discord_id)
          if found is None:
               self._store.append_row(self._schema, self._schema.to_buffer({"discordId": discord_id, **values}))
               logger.info("Created seller info for %s", discord_id)
          elif values:
               index, _ = found
               self._store.update_cells(
                    self._schema,
                    index,
                    {self._schema.offset(name): value for name, value in values.items()},
               )
               logger.info("Updated seller info for %s", discord_id)

          self._cache.seller_info.invalidate(discord_id)
          return self.get(discord_id)
