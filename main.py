# main.py
"""
PayTrack API - payment ledger over a spreadsheet-shaped row store.

Run: uvicorn main:app --reload
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import config
from routers import analytics, auth, payment_info, payments, sellers, users
from services.container import Services, build_services
from utils.error_handling import add_error_handlers

logging.basicConfig(
     level=getattr(logging, config.LOG_LEVEL, logging.INFO),
     format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(services: Optional[Services] = None) -> FastAPI:
     """
     Build the application. Pass ``services`` to run against a prebuilt
     service bundle (tests); otherwise one is built from config at startup.
     """

     @asynccontextmanager
     async def lifespan(app: FastAPI):
          if getattr(app.state, "services", None) is None:
               app.state.services = build_services()
          logger.info("PayTrack API started (backend=%s, cache=%s)", config.ROW_STORE_BACKEND, config.CACHE_BACKEND)
          yield
          app.state.services.close()
          logger.info("PayTrack API stopped")

     app = FastAPI(title="PayTrack API", lifespan=lifespan)
     app.state.services = services

     # CORS
     app.add_middleware(
          CORSMiddleware,
          allow_origins=config.CORS_ORIGINS,
          allow_credentials=True,
          allow_methods=["*"],
          allow_headers=["*"],
     )

     add_error_handlers(app)

     app.include_router(auth.router)
     app.include_router(payments.router)
     app.include_router(users.router)
     app.include_router(sellers.router)
     app.include_router(payment_info.router)
     app.include_router(analytics.router)

     @app.get("/health")
     def health():
          services = app.state.services
          store_ok = services.store.backend.ping()
          return {
               "status": "ok" if store_ok else "degraded",
               "store": store_ok,
               "cache": services.cache.stats(),
          }

     return app


app = create_app()


if __name__ == "__main__":
     uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
