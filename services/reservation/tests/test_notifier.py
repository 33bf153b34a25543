"""Tests for message rendering and the SMTP / RabbitMQ notifiers."""

from __future__ import annotations

import json
import smtplib
from unittest.mock import patch

import pika.exceptions
import pytest

import messages
from models import Reservation, ReservationStatus
from notifier import LogNotifier, Notification, Notifier, SmtpNotifier
from publisher import EventNotifier


def reservation(**overrides) -> Reservation:
    data = dict(id=7, name="Ann <b>", email="ann@x.com", date="2024-01-01", time="10:00", duration="60")
    data.update(overrides)
    return Reservation(**data)


NOTE = Notification(to="ann@x.com", subject="Hi", text="plain", html="<p>html</p>")


class TestMessages:
    def test_admin_request_links(self):
        n = messages.admin_request(reservation(), "boss+1@club.com", "http://host:3000/", "Billiard")

        assert n.to == "boss+1@club.com"
        assert "http://host:3000/approve/7/boss%2B1%40club.com" in n.text
        assert "http://host:3000/reject/7" in n.html
        assert "Duration: 60" in n.text

    def test_html_is_escaped(self):
        n = messages.admin_request(reservation(), "boss@club.com", "http://h", "Billiard")
        assert "Ann &lt;b&gt;" in n.html
        assert "Ann <b>" in n.text

    def test_approved_message(self):
        r = reservation(status=ReservationStatus.APPROVED, approved_by="The Boss")
        n = messages.approved(r, "Snooker")

        assert n.to == "ann@x.com"
        assert n.subject == "Your Snooker Reservation Has Been Approved!"
        assert "Approved by: The Boss" in n.text

    def test_rejected_message(self):
        n = messages.rejected(reservation(status=ReservationStatus.REJECTED), "Billiard")
        assert "could not be accepted" in n.text
        assert "Reservation ID: 7" in n.text


class TestSmtpNotifier:
    def test_sends_with_starttls_and_login(self):
        notifier = SmtpNotifier("smtp.test", 587, user="club@x.com", password="secret")
        with patch("notifier.smtplib.SMTP") as smtp_cls:
            smtp = smtp_cls.return_value.__enter__.return_value
            result = notifier.send(NOTE)

        assert result.success
        smtp_cls.assert_called_once_with("smtp.test", 587, timeout=10.0)
        smtp.starttls.assert_called_once()
        smtp.login.assert_called_once_with("club@x.com", "secret")
        sent = smtp.send_message.call_args.args[0]
        assert sent["To"] == "ann@x.com"
        assert sent["From"] == "club@x.com"

    def test_failure_is_reported_not_raised(self):
        notifier = SmtpNotifier("smtp.test", 587)
        with patch("notifier.smtplib.SMTP", side_effect=smtplib.SMTPConnectError(421, "busy")):
            result = notifier.send(NOTE)

        assert not result.success
        assert result.recipient == "ann@x.com"
        assert result.error

    def test_send_many_keeps_going_after_failure(self):
        notifier = SmtpNotifier("smtp.test", 25, starttls=False)
        with patch("notifier.smtplib.SMTP") as smtp_cls:
            smtp = smtp_cls.return_value.__enter__.return_value
            smtp.send_message.side_effect = [OSError("reset"), None]
            results = notifier.send_many([NOTE, Notification("b@x.com", "Hi", "t", "h")])

        assert [r.success for r in results] == [False, True]
        smtp.starttls.assert_not_called()
        smtp.login.assert_not_called()


class TestEventNotifier:
    def test_publishes_notification_requested(self):
        with patch("publisher.pika.BlockingConnection") as conn_cls:
            channel = conn_cls.return_value.channel.return_value
            result = EventNotifier("rabbit").send(NOTE)

        assert result.success
        channel.exchange_declare.assert_called_once_with(exchange="events", exchange_type="fanout", durable=True)
        body = json.loads(channel.basic_publish.call_args.kwargs["body"])
        assert body["type"] == "NotificationRequested"
        assert body["payload"]["to"] == "ann@x.com"
        conn_cls.return_value.close.assert_called_once()

    def test_broker_down_is_a_failed_result(self):
        with patch("publisher.pika.BlockingConnection", side_effect=pika.exceptions.AMQPConnectionError()):
            result = EventNotifier("rabbit").send(NOTE)

        assert not result.success
        assert result.error


def test_log_notifier_always_succeeds(caplog):
    caplog.set_level("INFO")
    result = LogNotifier().send(NOTE)
    assert result.success
    assert "mock email -> ann@x.com" in caplog.text


def test_notifier_requires_deliver():
    class Incomplete(Notifier):
        pass

    with pytest.raises(TypeError):
        Incomplete()
