# ============================================================
# notifier.py - Envoi des notifications (emails)
# ------------------------------------------------------------
# Un "notifier" reçoit un message déjà rendu (voir messages.py)
# et rapporte le succès ou l'échec de chaque envoi. Il ne lève
# jamais d'exception : un échec devient un NotificationResult
# avec success=False, journalisé ici.
#   - SmtpNotifier  : envoi direct via un serveur SMTP
#   - LogNotifier   : se contente de journaliser (dev local)
#   - EventNotifier : publication RabbitMQ (voir publisher.py)
# ============================================================
import logging
import smtplib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Iterable, List, Optional

from errors import NotificationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    to: str
    subject: str
    text: str
    html: str


@dataclass(frozen=True)
class NotificationResult:
    recipient: str
    success: bool
    error: Optional[str] = None


class Notifier(ABC):
    @abstractmethod
    def deliver(self, n: Notification) -> None:
        ...

    # Un échec est attrapé par destinataire et ne se propage pas
    def send(self, n: Notification) -> NotificationResult:
        try:
            self.deliver(n)
        except NotificationError as e:
            logger.error("notification to %s failed: %s", n.to, e.message)
            return NotificationResult(n.to, False, e.message)
        logger.info("notification sent to %s (%s)", n.to, n.subject)
        return NotificationResult(n.to, True)

    def send_many(self, notifications: Iterable[Notification]) -> List[NotificationResult]:
        return [self.send(n) for n in notifications]


class LogNotifier(Notifier):
    def deliver(self, n: Notification) -> None:
        logger.info("mock email -> %s: %s\n%s", n.to, n.subject, n.text)


class SmtpNotifier(Notifier):
    def __init__(self, host: str, port: int, user: str = "", password: str = "",
                 sender: str = "", starttls: bool = True, timeout: float = 10.0):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender or user
        self.starttls = starttls
        self.timeout = timeout

    def build_message(self, n: Notification) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = n.to
        msg["Subject"] = n.subject
        msg.set_content(n.text)
        msg.add_alternative(n.html, subtype="html")
        return msg

    def deliver(self, n: Notification) -> None:
        msg = self.build_message(n)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                if self.starttls:
                    smtp.starttls()
                if self.user:
                    smtp.login(self.user, self.password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(str(e)) from e
