# services/cache_service.py
"""
Cache Layer - TTL memoization of the hot read paths.

Three independent namespaces (seller-info, user-role, payment-list), each with
its own TTL. Expiry is passive: an entry is dropped when read after its
deadline, and every set sweeps out whatever else has expired. Misses are
never cached, and a set after a miss is last-writer-wins; every mutating
ledger operation invalidates the payment-list namespace.
"""
import json
import logging
import threading
import time
from typing import Any, Dict, Optional

import redis

from config import CACHE_TTL

logger = logging.getLogger(__name__)


class TTLNamespace:
     """In-process namespace with a fixed TTL."""

     def __init__(self, name: str, ttl_seconds: int, clock=time.monotonic):
          self.name = name
          self.ttl_seconds = ttl_seconds
          self._clock = clock
          self._store: Dict[str, Any] = {}
          self._expiry: Dict[str, float] = {}
          self._lock = threading.Lock()
          self._hits = 0
          self._misses = 0

     def get(self, key: str) -> Optional[Any]:
          with self._lock:
               if key in self._store:
                    if self._clock() >= self._expiry[key]:
                         del self._store[key]
                         del self._expiry[key]
                    else:
                         self._hits += 1
                         return self._store[key]
               self._misses += 1
               return None

     def set(self, key: str, value: Any) -> None:
          if value is None:
               return
          with self._lock:
               now = self._clock()
               self._sweep(now)
               self._store[key] = value
               self._expiry[key] = now + self.ttl_seconds

     def _sweep(self, now: float) -> None:
          """Drop every expired entry. Caller holds the lock."""
          expired = [key for key, deadline in self._expiry.items() if now >= deadline]
          for key in expired:
               del self._store[key]
               del self._expiry[key]

     def invalidate(self, key: Optional[str] = None) -> None:
          """Drop one key, or the whole namespace when key is None."""
          with self._lock:
               if key is None:
                    self._store.clear()
                    self._expiry.clear()
               else:
                    self._store.pop(key, None)
                    self._expiry.pop(key, None)

     def stats(self) -> Dict[str, Any]:
          total = self._hits + self._misses
          return {
               "namespace": self.name,
               "entries": len(self._store),
               "hits": self._hits,
               "misses": self._misses,
               "hit_ratio": round(self._hits / max(1, total) * 100, 2),
          }


class RedisNamespace:
     """Namespace stored in Redis under ``<name>:<key>`` with SETEX expiry."""

     def __init__(self, name: str, ttl_seconds: int, client):
          self.name = name
          self.ttl_seconds = ttl_seconds
          self.client = client

     def _key(self, key: str) -> str:
          return f"{self.name}:{key}"

     def get(self, key: str) -> Optional[Any]:
          value = self.client.get(self._key(key))
          if value is None:
               return None
          return json.loads(value)

     def set(self, key: str, value: Any) -> None:
          if value is None:
               return
          self.client.setex(self._key(key), self.ttl_seconds, json.dumps(value))

     def invalidate(self, key: Optional[str] = None) -> None:
          if key is not None:
               self.client.delete(self._key(key))
               return
          keys = list(self.client.scan_iter(match=f"{self.name}:*"))
          if keys:
               self.client.delete(*keys)

     def stats(self) -> Dict[str, Any]:
          return {"namespace": self.name, "backend": "redis"}


class CacheLayer:
     """The three namespaces the services read through."""

     def __init__(self, seller_info, user_role, payment_list):
          self.seller_info = seller_info
          self.user_role = user_role
          self.payment_list = payment_list

     @classmethod
     def in_memory(cls, ttl: Optional[Dict[str, int]] = None, clock=time.monotonic) -> "CacheLayer":
          ttl = {**CACHE_TTL, **(ttl or {})}
          return cls(
               seller_info=TTLNamespace("seller", ttl["seller_info"], clock),
               user_role=TTLNamespace("user", ttl["user_role"], clock),
               payment_list=TTLNamespace("payments", ttl["payment_list"], clock),
          )

     @classmethod
     def from_redis(cls, url: str, ttl: Optional[Dict[str, int]] = None) -> "CacheLayer":
          ttl = {**CACHE_TTL, **(ttl or {})}
          client = redis.Redis.from_url(url, decode_responses=True)
          logger.info("Using Redis cache at %s", url)
          return cls(
               seller_info=RedisNamespace("seller", ttl["seller_info"], client),
               user_role=RedisNamespace("user", ttl["user_role"], client),
               payment_list=RedisNamespace("payments", ttl["payment_list"], client),
          )

     def flush_all(self) -> None:
          self.seller_info.invalidate()
          self.user_role.invalidate()
          self.payment_list.invalidate()

     def stats(self) -> Dict[str, Any]:
          return {
               "seller_info": self.seller_info.stats(),
               "user_role": self.user_role.stats(),
               "payment_list": self.payment_list.stats(),
          }
