# ============================================================
# settings.py - Configuration du service Reservation
# ------------------------------------------------------------
# Lue une seule fois au démarrage (get_settings) depuis les
# variables d'environnement ou un fichier .env, puis immuable.
# ADMIN_EMAILS et ADMIN_EMAIL_MAPPING sont des valeurs JSON :
#   ADMIN_EMAILS='["boss@club.com"]'
#   ADMIN_EMAIL_MAPPING='{"boss@club.com": "The Boss"}'
# Les anciens noms EMAILS et EMAIL_MAPPING restent acceptés.
# ============================================================

from functools import lru_cache
from typing import Dict, List, Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    # === Persistence ===
    database_url: str = Field(default="sqlite:///./reservations.db")

    # === Links sent to administrators ===
    base_url: str = Field(default="http://localhost:3000")

    # === Administrators ===
    admin_emails: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("admin_emails", "emails"),
        description="Allow-list of administrators, also used as approval tokens",
    )
    admin_email_mapping: Dict[str, str] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("admin_email_mapping", "email_mapping"),
        description="Approval token -> identity recorded in approved_by",
    )

    # === Notifications ===
    notifier_backend: Literal["smtp", "rabbitmq", "log"] = "log"
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_starttls: bool = True
    mail_from: str = ""
    rabbitmq_host: str = "localhost"
    venue_name: str = "Billiard"

    # === Runtime ===
    environment: str = "production"
    log_level: str = "INFO"

    @property
    def sender(self) -> str:
        return self.mail_from or self.smtp_user

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    return Settings()
