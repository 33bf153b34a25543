# ============================================================
# Reservation API Router
# ------------------------------------------------------------
# Endpoints JSON pour consulter les réservations d'une date et
# soumettre une nouvelle demande. Les erreurs (ReservationError)
# remontent jusqu'au handler déclaré dans app.py.
# ============================================================
import logging
from typing import Optional, Union

from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel
from sqlmodel import Session

from dependencies import get_session, get_workflow
from errors import ValidationError
from models import to_public
from repository import ReservationRepository
from workflow import ReservationWorkflow, valid_date

logger = logging.getLogger(__name__)

router = APIRouter()


# Tous les champs sont optionnels ici : l'absence d'un champ doit
# produire un 400 du workflow, pas un 422 de FastAPI
class ReservationRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    duration: Optional[Union[str, int]] = None


# ------------------------------------------------------------
# GET /reserve?date=YYYY-MM-DD - Réservations d'une journée
# ------------------------------------------------------------
@router.get("/reserve")
def list_reservations(date: Optional[str] = Query(default=None), s: Session = Depends(get_session)):
    if not date:
        raise ValidationError("Date query parameter is required.")
    if not valid_date(date):
        raise ValidationError("Invalid date format. Please use YYYY-MM-DD.")

    rows = ReservationRepository(s).list_by_date(date)
    logger.info("found %d reservations for %s", len(rows), date)
    return [to_public(r) for r in rows]


# ------------------------------------------------------------
# POST /reserve - Nouvelle demande
# ------------------------------------------------------------
# - Crée la réservation en "pending"
# - Prévient les admins ; un échec d'email ne fait pas échouer la requête
# ------------------------------------------------------------
@router.post("/reserve")
def submit_reservation(
    body: Optional[ReservationRequest] = Body(default=None),
    workflow: ReservationWorkflow = Depends(get_workflow),
):
    data = body.model_dump() if body is not None else {}
    result = workflow.submit(data)
    return {
        "message": "Reservation request received. Approval pending.",
        "reservationId": result.reservation.id,
        "note": "You will receive a confirmation email once approved.",
    }
