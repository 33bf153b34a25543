# ============================================================
# admins.py - Annuaire des administrateurs
# ------------------------------------------------------------
# Construit une seule fois au démarrage à partir des Settings,
# puis immuable. Le jeton présent dans le lien d'approbation est
# l'email de l'administrateur ; l'identité enregistrée dans
# approved_by vient du mapping (ou de l'email à défaut).
# ============================================================
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Tuple

from errors import AuthorizationError
from settings import Settings


@dataclass(frozen=True)
class AdminDirectory:
    emails: Tuple[str, ...] = ()
    identities: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_settings(cls, settings: Settings) -> "AdminDirectory":
        return cls(
            emails=tuple(settings.admin_emails),
            identities=MappingProxyType(dict(settings.admin_email_mapping)),
        )

    def is_allowed(self, token: str) -> bool:
        return token in self.emails

    # Jeton inconnu → AuthorizationError (avant toute lecture en base)
    def resolve(self, token: str) -> str:
        if not self.is_allowed(token):
            raise AuthorizationError("Unauthorized approval attempt.")
        return self.identities.get(token) or token
