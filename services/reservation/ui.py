# ============================================================
# ui.py - Pages HTML des liens envoyés aux administrateurs
# ------------------------------------------------------------
# Les liens approve / reject des emails arrivent ici. Chaque
# réponse est une page HTML (Jinja2) qui rappelle toujours
# l'identifiant de la réservation.
# ============================================================
import logging
from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from dependencies import get_workflow
from errors import NotFoundError, ReservationError
from workflow import ReservationWorkflow, TransitionResult

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
router = APIRouter()


def result_page(request: Request, result: TransitionResult, title: str, color: str, outcome: str):
    notification = result.notification
    return templates.TemplateResponse(
        request,
        "result.html",
        {
            "r": result.reservation,
            "title": title,
            "color": color,
            "outcome": outcome,
            "notified": result.notified,
            "notify_error": notification.error if notification else None,
        },
    )


# Les détails d'une erreur 500 ne sont affichés qu'en développement
def error_page(request: Request, title: str, e: ReservationError, reservation_id: str, fallback: str):
    message = e.message
    if e.status_code >= 500 and not request.app.state.settings.is_development:
        message = fallback
    return templates.TemplateResponse(
        request,
        "message.html",
        {"title": title, "message": message, "reservation_id": reservation_id, "status_code": e.status_code},
        status_code=e.status_code,
    )


# Un identifiant non numérique ne peut correspondre à aucune réservation
def parse_id(reservation_id: str) -> int:
    try:
        return int(reservation_id)
    except ValueError:
        raise NotFoundError("Reservation not found.", reservation_id) from None


# Approbation : /approve/{id}/{jeton admin}
@router.get("/approve/{reservation_id}/{admin_token}", response_class=HTMLResponse)
def approve(request: Request, reservation_id: str, admin_token: str,
            workflow: ReservationWorkflow = Depends(get_workflow)):
    try:
        result = workflow.approve(parse_id(reservation_id), admin_token)
    except ReservationError as e:
        return error_page(request, "Approval Error", e, reservation_id, "An error occurred during approval")
    except Exception as e:
        logger.exception("approval process error for %s", reservation_id)
        err = ReservationError(str(e) or type(e).__name__, reservation_id)
        return error_page(request, "Approval Error", err, reservation_id, "An error occurred during approval")
    return result_page(request, result, "Reservation Approved", "#2ecc71", "The reservation has been approved.")


# Refus : /reject/{id}
@router.get("/reject/{reservation_id}", response_class=HTMLResponse)
def reject(request: Request, reservation_id: str, workflow: ReservationWorkflow = Depends(get_workflow)):
    try:
        result = workflow.reject(parse_id(reservation_id))
    except ReservationError as e:
        return error_page(request, "Rejection Error", e, reservation_id, "An error occurred during rejection")
    except Exception as e:
        logger.exception("rejection process error for %s", reservation_id)
        err = ReservationError(str(e) or type(e).__name__, reservation_id)
        return error_page(request, "Rejection Error", err, reservation_id, "An error occurred during rejection")
    return result_page(request, result, "Reservation Rejected", "#e74c3c",
                       "The reservation has been marked as rejected.")
