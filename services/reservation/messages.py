# ============================================================
# messages.py - Rendu des emails (Jinja2)
# ------------------------------------------------------------
# Trois messages, chacun en version texte + HTML :
#   1️. admin_request : nouvelle demande, avec liens approve/reject
#   2️. approved      : confirmation envoyée au demandeur
#   3️. rejected      : refus envoyé au demandeur
# ============================================================
from pathlib import Path
from urllib.parse import quote

from jinja2 import Environment, FileSystemLoader, select_autoescape

from models import Reservation
from notifier import Notification

TEMPLATES_DIR = Path(__file__).parent / "templates" / "email"

env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
)


def approve_link(base_url: str, reservation_id: int, admin_email: str) -> str:
    return f"{base_url.rstrip('/')}/approve/{reservation_id}/{quote(admin_email, safe='')}"


def reject_link(base_url: str, reservation_id: int) -> str:
    return f"{base_url.rstrip('/')}/reject/{reservation_id}"


def _render(name: str, **ctx) -> tuple[str, str]:
    return env.get_template(f"{name}.txt").render(**ctx), env.get_template(f"{name}.html").render(**ctx)


def admin_request(r: Reservation, admin_email: str, base_url: str, venue: str) -> Notification:
    text, html = _render(
        "admin_request",
        r=r,
        approve_link=approve_link(base_url, r.id, admin_email),
        reject_link=reject_link(base_url, r.id),
    )
    return Notification(
        to=admin_email,
        subject=f"New {venue} Reservation Request: {r.date} {r.time}",
        text=text,
        html=html,
    )


def approved(r: Reservation, venue: str) -> Notification:
    text, html = _render("approved", r=r)
    return Notification(r.email, f"Your {venue} Reservation Has Been Approved!", text, html)


def rejected(r: Reservation, venue: str) -> Notification:
    text, html = _render("rejected", r=r)
    return Notification(r.email, f"Your {venue} Reservation Request Was Declined", text, html)
