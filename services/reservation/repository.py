# ============================================================
# repository.py - Accès aux données Reservation
# ------------------------------------------------------------
# Ce module implémente le design pattern "Repository" pour la
# table reservations. Il isole la logique d’accès et de
# manipulation des données de la couche API et du workflow.
# Chaque opération est validée (commit) immédiatement.
# ============================================================
import logging
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from errors import ConflictError, NotFoundError, PersistenceError, ValidationError
from models import Reservation, ReservationStatus, TransitionFields, utcnow

logger = logging.getLogger(__name__)


# ReservationRepository
# Fournit les méthodes CRUD sur la table reservations. Une instance par session (donc par requête HTTP).
class ReservationRepository:
    def __init__(self, session: Session):
        self.session = session

    def create(self, r: Reservation) -> Reservation:
        if r.status is None:
            r.status = ReservationStatus.PENDING
        if r.requested_at is None:
            r.requested_at = utcnow()
        try:
            self.session.add(r)
            self.session.commit()
            self.session.refresh(r)
        except SQLAlchemyError as e:
            self._fail("create", e)
        return r

    # Renvoie None si la ligne n'existe pas (jamais d'exception pour ce cas)
    def get(self, reservation_id: int) -> Optional[Reservation]:
        try:
            return self.session.exec(select(Reservation).where(Reservation.id == reservation_id)).first()
        except SQLAlchemyError as e:
            self._fail("get", e)

    def list_by_date(self, date: str) -> List[Reservation]:
        try:
            rows = self.session.exec(
                select(Reservation).where(Reservation.date == date).order_by(Reservation.time, Reservation.id)
            ).all()
        except SQLAlchemyError as e:
            self._fail("list_by_date", e)
        return list(rows)

    # ------------------------------------------------------------
    # Mise à jour par identifiant
    # ------------------------------------------------------------
    # - `fields` est une charge fermée (ApproveFields / RejectFields)
    # - si `expected_status` est fourni, l'UPDATE est conditionnel
    #   (compare-and-set) : une seule écriture peut quitter "pending"
    # ------------------------------------------------------------
    def update(
        self,
        reservation_id: int,
        fields: Optional[TransitionFields],
        expected_status: Optional[ReservationStatus] = None,
    ) -> Reservation:
        values = fields.values() if fields is not None else {}
        if not values:
            raise ValidationError("No fields to update", reservation_id)

        stmt = update(Reservation).where(Reservation.id == reservation_id)
        if expected_status is not None:
            stmt = stmt.where(Reservation.status == expected_status)
        stmt = stmt.values(**values)

        try:
            result = self.session.connection().execute(stmt)
            self.session.commit()
        except SQLAlchemyError as e:
            self._fail("update", e)

        if result.rowcount == 0:
            current = self.get(reservation_id)
            if current is None:
                raise NotFoundError("Reservation not found.", reservation_id)
            raise ConflictError(
                f"Reservation status is {current.status.value}, expected {expected_status.value}.",
                reservation_id,
            )

        # relecture après mutation
        self.session.expire_all()
        return self.get(reservation_id)

    def _fail(self, op: str, e: SQLAlchemyError):
        self.session.rollback()
        logger.error("reservation store %s failed: %s", op, e)
        raise PersistenceError(str(e)) from e
