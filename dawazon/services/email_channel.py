# dawazon/services/email_channel.py
"""E-mail channel port and the in-process adapter used by default."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import uuid4

from dawazon.utils.settings import MAIL_FROM
from dawazon.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class EmailResult:
    message_id: str
    sent_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class EmailPort(ABC):
    @abstractmethod
    def send(self, to: str, subject: str, body: str) -> EmailResult:
        """Send a plain text e-mail."""


class FakeEmailAdapter(EmailPort):
    """Records every message in memory instead of delivering it."""

    def __init__(self, sender: str = MAIL_FROM):
        self.sender = sender
        self.sent_emails: list[dict] = []

    def send(self, to: str, subject: str, body: str) -> EmailResult:
        result = EmailResult(message_id=f"fake-{uuid4().hex[:12]}")
        self.sent_emails.append(
            {
                "from": self.sender,
                "to": to,
                "subject": subject,
                "body": body,
                "message_id": result.message_id,
            }
        )
        logger.info("Email recorded", to=to, subject=subject, message_id=result.message_id)
        return result

    def reset(self) -> None:
        self.sent_emails.clear()


_channel: EmailPort | None = None


def get_email_channel() -> EmailPort:
    global _channel
    if _channel is None:
        _channel = FakeEmailAdapter()
    return _channel


def set_email_channel(channel: EmailPort) -> None:
    global _channel
    _channel = channel


def reset_email_channel() -> None:
    global _channel
    _channel = None
