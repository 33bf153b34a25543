# ============================================================
# app.py - Point d’entrée du service Reservation
# ------------------------------------------------------------
# Ce module assemble l’application FastAPI :
#   - Charge la configuration (une seule fois, immuable)
#   - Construit l'annuaire admin, le notifier et les verrous
#   - Crée la table reservations au démarrage
#   - Monte les routes JSON (api) et HTML (ui)
# Lancement : uvicorn app:app --port 3000 (depuis ce dossier)
# ============================================================
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

import models  # noqa: F401  (enregistre la table dans SQLModel.metadata)
from admins import AdminDirectory
from api import router as api_router
from errors import ReservationError
from logging_config import configure_logging
from notifier import LogNotifier, Notifier, SmtpNotifier
from publisher import EventNotifier
from settings import Settings, get_settings
from ui import router as ui_router
from workflow import TransitionLocks

logger = logging.getLogger(__name__)


def make_engine(database_url: str) -> Engine:
    # SQLite : la session est utilisée depuis le threadpool de FastAPI
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(database_url, pool_pre_ping=True, connect_args=connect_args)


def build_notifier(settings: Settings) -> Notifier:
    if settings.notifier_backend == "smtp":
        return SmtpNotifier(
            host=settings.smtp_host,
            port=settings.smtp_port,
            user=settings.smtp_user,
            password=settings.smtp_password,
            sender=settings.sender,
            starttls=settings.smtp_starttls,
        )
    if settings.notifier_backend == "rabbitmq":
        return EventNotifier(settings.rabbitmq_host)
    return LogNotifier()


def create_app(settings: Settings | None = None, engine: Engine | None = None,
               notifier: Notifier | None = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(title="Reservation Service")
    app.state.settings = settings
    app.state.engine = engine or make_engine(settings.database_url)
    app.state.admins = AdminDirectory.from_settings(settings)
    app.state.notifier = notifier or build_notifier(settings)
    app.state.locks = TransitionLocks()

    # Exécuté automatiquement par FastAPI au lancement : crée la table.
    @app.on_event("startup")
    def start():
        SQLModel.metadata.create_all(app.state.engine)
        logger.info("reservation service ready (notifier=%s, admins=%s)",
                    settings.notifier_backend, list(app.state.admins.emails))
        if not app.state.admins.emails:
            logger.warning("no administrators configured: approval links will not be sent")

    # Erreurs métier des routes JSON → {"error": ...}
    @app.exception_handler(ReservationError)
    def reservation_error(request: Request, exc: ReservationError):
        body = {"error": exc.message}
        if exc.status_code >= 500:
            logger.error("request %s %s failed: %s", request.method, request.url.path, exc.message)
            body = {"error": "An error occurred while processing your request."}
            if settings.is_development:
                body["details"] = exc.message
        return JSONResponse(body, status_code=exc.status_code)

    # Corps de requête illisible → 400 plutôt que 422
    @app.exception_handler(RequestValidationError)
    def request_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse({"error": "Invalid request."}, status_code=400)

    @app.get("/health")
    def health():
        return {"ok": True}

    app.include_router(api_router)
    app.include_router(ui_router)

    return app


def main_app() -> FastAPI:
    settings = get_settings()
    configure_logging(source="reservation", level=settings.log_level)
    return create_app(settings)


app = main_app()
