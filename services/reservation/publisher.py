# ============================================================
# publisher.py - Émission d'événements RabbitMQ
# ------------------------------------------------------------
# Variante du notifier pour les déploiements où l'envoi des
# emails est délégué à un service externe : chaque message est
# publié sur l’échange "events" (fanout, durable) sous la forme
#   {"type": "NotificationRequested", "payload": {...}}
# et n'importe quel consommateur lié à l'échange le reçoit.
# ============================================================
import json

import pika
from pika.exceptions import AMQPError

from errors import NotificationError
from notifier import Notification, Notifier

EXCHANGE = "events"


def publish_event(host: str, event_type: str, payload: dict):
    # Ouvre une connexion vers RabbitMQ
    conn = pika.BlockingConnection(pika.ConnectionParameters(host=host, heartbeat=60))
    try:
        ch = conn.channel()
        # Déclare ou crée l’échange fanout s’il n’existe pas déjà
        ch.exchange_declare(exchange=EXCHANGE, exchange_type="fanout", durable=True)
        message = {"type": event_type, "payload": payload}
        ch.basic_publish(exchange=EXCHANGE, routing_key="", body=json.dumps(message))
    finally:
        conn.close()


class EventNotifier(Notifier):
    def __init__(self, host: str):
        self.host = host

    def deliver(self, n: Notification) -> None:
        payload = {"to": n.to, "subject": n.subject, "text": n.text, "html": n.html}
        try:
            publish_event(self.host, "NotificationRequested", payload)
        except (AMQPError, OSError) as e:
            raise NotificationError(str(e) or type(e).__name__) from e
