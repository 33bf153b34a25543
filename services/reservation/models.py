# ============================================================
# models.py - Modèles de données SQLModel (Reservation Service)
# ------------------------------------------------------------
# Définit la table "reservations" et les charges utiles fermées
# autorisées pour faire évoluer son statut :
#   1️. Reservation : une demande de créneau
#   2️. ApproveFields / RejectFields : seules mises à jour permises
# ============================================================
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union

from sqlalchemy import Column, Enum as SAEnum
from sqlmodel import SQLModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Cycle de vie : pending → approved | rejected (états terminaux)
class ReservationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# ------------------------------------------------------------
# Reservation
# ------------------------------------------------------------
# - date au format YYYY-MM-DD, time au format HH:MM (tri par heure)
# - approved_by / approved_at uniquement si status = approved
# - rejected_at uniquement si status = rejected
# ------------------------------------------------------------
class Reservation(SQLModel, table=True):
    __tablename__ = "reservations"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: str
    date: str = Field(index=True)
    time: str
    duration: str
    # on stocke la valeur ("pending"), pas le nom du membre
    status: ReservationStatus = Field(
        default=ReservationStatus.PENDING,
        sa_column=Column(
            SAEnum(
                ReservationStatus,
                name="reservation_status",
                native_enum=False,
                length=16,
                values_callable=lambda e: [m.value for m in e],
            ),
            nullable=False,
        ),
    )
    requested_at: datetime = Field(default_factory=utcnow)
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None


# Transition vers "approved" : enregistre aussi qui a validé
@dataclass(frozen=True)
class ApproveFields:
    approved_by: str
    approved_at: datetime

    status = ReservationStatus.APPROVED

    def values(self) -> dict:
        return {
            "status": self.status,
            "approved_by": self.approved_by,
            "approved_at": self.approved_at,
        }


@dataclass(frozen=True)
class RejectFields:
    rejected_at: datetime

    status = ReservationStatus.REJECTED

    def values(self) -> dict:
        return {"status": self.status, "rejected_at": self.rejected_at}


TransitionFields = Union[ApproveFields, RejectFields]


# Représentation JSON publique (clés camelCase attendues par le front)
def to_public(r: Reservation) -> dict:
    return {
        "id": r.id,
        "name": r.name,
        "email": r.email,
        "date": r.date,
        "time": r.time,
        "duration": r.duration,
        "status": r.status.value,
        "approvedBy": r.approved_by,
    }
