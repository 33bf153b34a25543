# ============================================================
# workflow.py - Machine à états des réservations
# ------------------------------------------------------------
#   submit  : crée une réservation "pending" puis prévient
#             chaque administrateur (liens approve / reject)
#   approve : pending → approved (identité admin enregistrée)
#   reject  : pending → rejected
# Chaque transition relit le statut courant, le valide, puis
# écrit (read-validate-write) sous un verrou par identifiant.
# L'UPDATE est de plus conditionnel (status = pending) pour les
# écritures venant d'autres processus.
# ============================================================
import logging
import re
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from sqlmodel import Session

import messages
from admins import AdminDirectory
from errors import ConflictError, NotFoundError, ValidationError
from models import ApproveFields, RejectFields, Reservation, ReservationStatus, utcnow
from notifier import NotificationResult, Notifier
from repository import ReservationRepository
from settings import Settings

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
REQUIRED_FIELDS = ("name", "email", "date", "time", "duration")


def valid_date(value: str) -> bool:
    if not re.fullmatch(r"\d{4}-\d{2}-\d{2}", value or ""):
        return False
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return False
    return True


# Registre de verrous par identifiant, partagé par toutes les requêtes.
# Une entrée vit tant qu'au moins une requête la détient, puis disparaît.
class TransitionLocks:
    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[int, List] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, reservation_id: int):
        with self._guard:
            entry = self._locks.setdefault(reservation_id, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[reservation_id]


@dataclass
class SubmissionResult:
    reservation: Reservation
    notifications: List[NotificationResult] = field(default_factory=list)


@dataclass
class TransitionResult:
    reservation: Reservation
    notification: Optional[NotificationResult] = None

    @property
    def notified(self) -> bool:
        return self.notification is not None and self.notification.success


class ReservationWorkflow:
    def __init__(self, session: Session, admins: AdminDirectory, notifier: Notifier,
                 locks: TransitionLocks, settings: Settings):
        self.repo = ReservationRepository(session)
        self.admins = admins
        self.notifier = notifier
        self.locks = locks
        self.settings = settings

    # ------------------------------------------------------------
    # Soumission d'une demande
    # ------------------------------------------------------------
    # - Valide les champs requis et le format email / date / heure
    # - Persiste en "pending"
    # - Envoie un email à chaque admin ; les échecs sont tolérés
    # ------------------------------------------------------------
    def submit(self, data: dict) -> SubmissionResult:
        cleaned = self.validate_request(data)
        created = self.repo.create(Reservation(**cleaned))
        logger.info("new reservation request %s for %s %s by %s",
                    created.id, created.date, created.time, created.email)

        results = self.notifier.send_many(
            messages.admin_request(created, email, self.settings.base_url, self.settings.venue_name)
            for email in self.admins.emails
        )
        failed = [r.recipient for r in results if not r.success]
        if failed:
            logger.warning("reservation %s: admin notification failed for %s", created.id, ", ".join(failed))
        return SubmissionResult(created, results)

    @staticmethod
    def validate_request(data: dict) -> dict:
        cleaned = {}
        for name in REQUIRED_FIELDS:
            value = data.get(name)
            value = "" if value is None else str(value).strip()
            if not value:
                raise ValidationError("All fields are required.")
            cleaned[name] = value

        if not EMAIL_RE.match(cleaned["email"]):
            raise ValidationError("Please enter a valid email address.")
        if not valid_date(cleaned["date"]):
            raise ValidationError("Invalid date format. Please use YYYY-MM-DD.")
        if not TIME_RE.match(cleaned["time"]):
            raise ValidationError("Invalid time format. Please use HH:MM.")
        return cleaned

    def approve(self, reservation_id: int, admin_token: str) -> TransitionResult:
        # autorisation avant toute lecture en base
        approver = self.admins.resolve(admin_token)
        logger.info("approval attempt for %s by %s", reservation_id, approver)

        fields = ApproveFields(approved_by=approver, approved_at=utcnow())
        updated = self._transition(reservation_id, fields, self._check_approvable)
        logger.info("reservation %s approved by %s", reservation_id, approver)

        result = self.notifier.send(messages.approved(updated, self.settings.venue_name))
        return TransitionResult(updated, result)

    def reject(self, reservation_id: int) -> TransitionResult:
        logger.info("rejection attempt for %s", reservation_id)

        fields = RejectFields(rejected_at=utcnow())
        updated = self._transition(reservation_id, fields, self._check_rejectable)
        logger.info("reservation %s rejected", reservation_id)

        result = self.notifier.send(messages.rejected(updated, self.settings.venue_name))
        return TransitionResult(updated, result)

    # read-validate-write sous verrou ; si le compare-and-set échoue
    # (écriture concurrente ailleurs) on relit et on revalide
    def _transition(self, reservation_id: int, fields, check) -> Reservation:
        with self.locks.hold(reservation_id):
            check(reservation_id, self.repo.get(reservation_id))
            try:
                return self.repo.update(reservation_id, fields, expected_status=ReservationStatus.PENDING)
            except ConflictError:
                check(reservation_id, self.repo.get(reservation_id))
                raise

    @staticmethod
    def _check_approvable(reservation_id: int, r: Optional[Reservation]):
        if r is None:
            logger.error("reservation not found: %s", reservation_id)
            raise NotFoundError("Reservation not found.", reservation_id)
        if r.status == ReservationStatus.APPROVED:
            logger.info("reservation %s already approved by %s", reservation_id, r.approved_by)
            raise ConflictError(f"Reservation already approved by {r.approved_by}", reservation_id)
        if r.status == ReservationStatus.REJECTED:
            logger.info("cannot approve rejected reservation %s", reservation_id)
            raise ConflictError("Cannot approve a rejected reservation.", reservation_id)
        if r.status != ReservationStatus.PENDING:
            raise ConflictError(f"Current status ({r.status}) cannot be approved.", reservation_id)

    @staticmethod
    def _check_rejectable(reservation_id: int, r: Optional[Reservation]):
        if r is None:
            logger.error("reservation not found: %s", reservation_id)
            raise NotFoundError("Reservation not found.", reservation_id)
        if r.status == ReservationStatus.REJECTED:
            logger.info("reservation %s already rejected", reservation_id)
            raise ConflictError("This reservation was already rejected.", reservation_id)
        if r.status == ReservationStatus.APPROVED:
            logger.info("cannot reject reservation %s approved by %s", reservation_id, r.approved_by)
            raise ConflictError(
                f"This reservation was previously approved by {r.approved_by}. Cannot be rejected.",
                reservation_id,
            )
        if r.status != ReservationStatus.PENDING:
            raise ConflictError(f"This reservation's status ({r.status}) is not suitable for rejection.",
                                reservation_id)
