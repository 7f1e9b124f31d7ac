# services/container.py
"""
Explicit construction of the service graph.

``build_services`` wires one backend, adapter, cache and the services on top
of them; main.py stores the result on ``app.state.services`` and closes it on
shutdown. Tests build their own bundle around an in-memory backend.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import config
from database import create_db_engine, create_session_factory, init_db
from services.analytics_service import AnalyticsService
from services.audit_service import AuditLog
from services.cache_service import CacheLayer
from services.column_schema import SCHEMAS
from services.events import EventPublisher
from services.ledger_service import PaymentLedger
from services.notifier import DiscordNotifier
from services.payment_info_service import PaymentInfoService
from services.row_store import RowBackend, RowStoreAdapter, SqlRowBackend
from services.seller_service import SellerService
from services.sheets_backend import SheetsRowBackend
from services.user_service import UserService
from utils.google_auth import ServiceAccountAuth, load_service_account

logger = logging.getLogger(__name__)


@dataclass
class Services:
     store: RowStoreAdapter
     cache: CacheLayer
     events: EventPublisher
     audit: AuditLog
     payment_info: PaymentInfoService
     users: UserService
     sellers: SellerService
     ledger: PaymentLedger
     analytics: AnalyticsService

     def close(self) -> None:
          self.store.backend.close()


def build_backend() -> RowBackend:
     if config.ROW_STORE_BACKEND == "sheets":
          account = load_service_account(
               config.GOOGLE_SHEETS_SERVICE_ACCOUNT_JSON, config.GOOGLE_SHEETS_SERVICE_ACCOUNT_PATH
          )
          logger.info("Using Google Sheets backend (%s)", config.GOOGLE_SHEETS_SPREADSHEET_ID)
          return SheetsRowBackend(
               config.GOOGLE_SHEETS_SPREADSHEET_ID,
               ServiceAccountAuth(account, timeout=config.GOOGLE_SHEETS_TIMEOUT),
               widths={name: schema.width for name, schema in SCHEMAS.items()},
               timeout=config.GOOGLE_SHEETS_TIMEOUT,
          )
     if config.ROW_STORE_BACKEND != "sql":
          raise ValueError(f"Unknown ROW_STORE_BACKEND {config.ROW_STORE_BACKEND!r}")

     engine = create_db_engine()
     init_db(engine)
     logger.info("Using SQL backend")
     return SqlRowBackend(create_session_factory(engine))


def build_cache() -> CacheLayer:
     if config.CACHE_BACKEND == "redis":
          return CacheLayer.from_redis(config.REDIS_URL)
     return CacheLayer.in_memory()


def build_services(
     backend: Optional[RowBackend] = None,
     cache: Optional[CacheLayer] = None,
     webhook_url: Optional[str] = None,
     default_admins=None,
) -> Services:
     store = RowStoreAdapter(backend or build_backend())
     cache = cache or build_cache()

     events = EventPublisher()
     events.subscribe(DiscordNotifier(config.DISCORD_WEBHOOK_URL if webhook_url is None else webhook_url))

     audit = AuditLog(store)
     payment_info = PaymentInfoService(store)
     users = UserService(store, cache, config.DEFAULT_ADMINS if default_admins is None else default_admins)
     sellers = SellerService(store, cache)
     ledger = PaymentLedger(store, audit, cache, payment_info=payment_info, users=users, events=events)

     return Services(
          store=store,
          cache=cache,
          events=events,
          audit=audit,
          payment_info=payment_info,
          users=users,
          sellers=sellers,
          ledger=ledger,
          analytics=AnalyticsService(ledger),
     )
