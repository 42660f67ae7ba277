"""
Tests for the simulated email channel.
"""

from shared.channels import DEFAULT_SENDER, EmailChannel
from shared.models import AppNotification, NotificationType


class TestEmailChannel:

    def test_send_records_message(self):
        channel = EmailChannel()

        message = channel.send("a@b.c", "[POS Pro] Erreur", "Stock insuffisant")

        assert channel.get_sent_count() == 1
        assert message.recipient == "a@b.c"
        assert message.sender == DEFAULT_SENDER
        assert "a@b.c" in str(message)

    def test_custom_sender(self):
        channel = EmailChannel(sender="caisse@boutique.ht")

        assert channel.send("a@b.c", "s", "b").sender == "caisse@boutique.ht"

    def test_find_message_to(self):
        channel = EmailChannel()
        channel.send("first@x.y", "s", "one")
        channel.send("second@x.y", "s", "two")
        channel.send("first@x.y", "s", "three")

        assert channel.find_message_to("first@x.y").body == "one"
        assert channel.find_message_to("nobody@x.y") is None

    def test_clear_history(self):
        channel = EmailChannel()
        channel.send("a@b.c", "s", "b")

        channel.clear_history()

        assert channel.get_sent_count() == 0

    def test_send_is_logged(self, caplog):
        channel = EmailChannel()

        with caplog.at_level("INFO", logger="notifications"):
            channel.send("a@b.c", "Sujet", "Corps")

        assert "[EMAIL] To: a@b.c" in caplog.text

    def test_alert_uses_type_subject(self):
        channel = EmailChannel()
        notification = AppNotification(
            id="n1", message="Stock faible", type=NotificationType.WARNING,
        )

        message = channel.alert(notification, to="a@b.c")

        assert message.subject == "[POS Pro] Avertissement"
        assert message.body == "Stock faible"
        assert message.notification_type == NotificationType.WARNING
