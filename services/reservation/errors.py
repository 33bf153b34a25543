# ============================================================
# errors.py - Erreurs métier du service Reservation
# ------------------------------------------------------------
# Chaque erreur porte son code HTTP. Les routes JSON les laissent
# remonter jusqu'au handler de l'app, les routes HTML (ui.py) les
# attrapent pour afficher une page de message.
# ============================================================


class ReservationError(Exception):
    status_code = 500

    def __init__(self, message: str, reservation_id: int | None = None):
        super().__init__(message)
        self.message = message
        self.reservation_id = reservation_id


# Entrée client manquante ou mal formée
class ValidationError(ReservationError):
    status_code = 400


class NotFoundError(ReservationError):
    status_code = 404


# Jeton administrateur absent de la liste autorisée
class AuthorizationError(ReservationError):
    status_code = 403


# Statut courant non éligible pour la transition demandée
class ConflictError(ReservationError):
    status_code = 400


# Échec de lecture/écriture en base
class PersistenceError(ReservationError):
    status_code = 500


# Échec d'envoi d'une notification : journalisé, jamais renvoyé au client
class NotificationError(ReservationError):
    status_code = 500
