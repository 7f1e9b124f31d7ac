# tests/test_cache.py
from unittest.mock import MagicMock

from services.cache_service import CacheLayer, RedisNamespace, TTLNamespace
from tests.conftest import FakeClock


def test_entries_expire_after_ttl():
     clock = FakeClock()
     namespace = TTLNamespace("payments", 120, clock)
     namespace.set("all", [1, 2])

     clock.advance(119)
     assert namespace.get("all") == [1, 2]
     clock.advance(1)
     assert namespace.get("all") is None


def test_set_sweeps_expired_entries():
     clock = FakeClock()
     namespace = TTLNamespace("seller", 600, clock)
     namespace.set("1", {"card": "6037"})
     namespace.set("2", {"card": "5022"})

     clock.advance(600)
     namespace.set("3", {"card": "6219"})

     assert namespace.stats()["entries"] == 1
     assert namespace.get("3") == {"card": "6219"}


def test_none_is_never_cached():
     namespace = TTLNamespace("seller", 600, FakeClock())
     namespace.set("42", None)
     assert namespace.get("42") is None
     assert namespace.stats()["entries"] == 0


def test_invalidate_key_and_all():
     namespace = TTLNamespace("user", 1800, FakeClock())
     namespace.set("a", "Admin")
     namespace.set("b", "User")

     namespace.invalidate("a")
     assert namespace.get("a") is None
     assert namespace.get("b") == "User"

     namespace.invalidate()
     assert namespace.get("b") is None


def test_stats_count_hits_and_misses():
     namespace = TTLNamespace("user", 10, FakeClock())
     namespace.get("x")
     namespace.set("x", "User")
     namespace.get("x")
     stats = namespace.stats()
     assert stats["hits"] == 1
     assert stats["misses"] == 1
     assert stats["hit_ratio"] == 50.0


def test_layer_namespaces_are_independent():
     clock = FakeClock()
     cache = CacheLayer.in_memory(clock=clock)
     cache.seller_info.set("1", {"card": "x"})
     cache.user_role.set("1", "Admin")
     cache.payment_list.set("all", [])

     cache.payment_list.invalidate()
     assert cache.seller_info.get("1") == {"card": "x"}
     assert cache.user_role.get("1") == "Admin"

     clock.advance(601)
     assert cache.seller_info.get("1") is None
     assert cache.user_role.get("1") == "Admin"


def test_layer_ttl_override():
     clock = FakeClock()
     cache = CacheLayer.in_memory(ttl={"payment_list": 5}, clock=clock)
     cache.payment_list.set("all", ["p"])
     clock.advance(5)
     assert cache.payment_list.get("all") is None


def test_flush_all():
     cache = CacheLayer.in_memory(clock=FakeClock())
     cache.seller_info.set("1", {})
     cache.user_role.set("1", "User")
     cache.flush_all()
     assert cache.seller_info.get("1") is None
     assert cache.user_role.get("1") is None


def test_redis_namespace_round_trip():
     client = MagicMock()
     namespace = RedisNamespace("seller", 600, client)

     namespace.set("42", {"card": "1234"})
     client.setex.assert_called_once_with("seller:42", 600, '{"card": "1234"}')

     client.get.return_value = '{"card": "1234"}'
     assert namespace.get("42") == {"card": "1234"}

     client.get.return_value = None
     assert namespace.get("43") is None


def test_redis_namespace_invalidate_all():
     client = MagicMock()
     client.scan_iter.return_value = iter(["payments:all", "payments:x"])
     RedisNamespace("payments", 120, client).invalidate()
     client.scan_iter.assert_called_once_with(match="payments:*")
     client.delete.assert_called_once_with("payments:all", "payments:x")
