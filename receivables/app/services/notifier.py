"""Outbound Notifier Interface

Defines the contract for emails and in-app notifications.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class EmailMessage:
    """Email to deliver; body is already rendered"""

    to: str
    subject: str
    body: str
    template: Optional[str] = None
    template_data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class EmailResult:
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


@dataclass
class Notification:
    """In-app notification about a billing entity"""

    type: str
    title: str
    message: str
    entity_id: Optional[int] = None
    entity_type: Optional[str] = None


class Notifier(ABC):
    """
    Abstract outbound notifier

    Best-effort: callers never let a notifier failure roll back a ledger
    change. Implementations can deliver via:
    - Application log
    - Webhook (HTTP POST)
    - Email gateway
    """

    @abstractmethod
    async def send_email(self, message: EmailMessage) -> EmailResult:
        """
        Send an email

        Args:
            message: EmailMessage to deliver

        Returns:
            EmailResult with success flag and message id or error
        """
        pass

    @abstractmethod
    async def create_notification(self, notification: Notification) -> None:
        """
        Create an in-app notification

        Args:
            notification: Notification to publish

        Raises:
            ExternalServiceError: if the notification could not be delivered
        """
        pass
