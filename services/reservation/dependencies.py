# ============================================================
# dependencies.py - Dépendances FastAPI partagées
# ------------------------------------------------------------
# Les collaborateurs (engine, annuaire admin, notifier, verrous)
# sont construits une fois dans create_app() et rangés dans
# app.state ; ces fonctions les exposent aux routes.
# ============================================================
from fastapi import Depends, Request
from sqlmodel import Session

from workflow import ReservationWorkflow


# Dépendance FastAPI : fournit une Session DB par requête, auto-close
def get_session(request: Request):
    with Session(request.app.state.engine) as s:
        yield s


def get_workflow(request: Request, s: Session = Depends(get_session)) -> ReservationWorkflow:
    state = request.app.state
    return ReservationWorkflow(s, state.admins, state.notifier, state.locks, state.settings)
