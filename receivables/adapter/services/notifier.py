"""Notifier Implementations

Provides concrete implementations for emails and in-app notifications.
"""

import logging
import uuid
from dataclasses import asdict
from typing import List, Optional
import httpx
from receivables.app.services.notifier import Notifier, EmailMessage, EmailResult, Notification
from receivables.domain.errors import ExternalServiceError

logger = logging.getLogger(__name__)


class LoggingNotifier(Notifier):
    """
    Notifier that logs messages

    Useful for development and testing, or as a fallback.
    """

    async def send_email(self, message: EmailMessage) -> EmailResult:
        """
        Log an outgoing email

        Returns:
            Always successful (logging never fails)
        """
        message_id = f"log-{uuid.uuid4()}"
        logger.info(f"[EMAIL] To: {message.to}, Subject: {message.subject}, Id: {message_id}")
        return EmailResult(success=True, message_id=message_id)

    async def create_notification(self, notification: Notification) -> None:
        logger.info(
            f"[NOTIFICATION] {notification.type}: {notification.title} - {notification.message} "
            f"({notification.entity_type} {notification.entity_id})"
        )


class WebhookNotifier(Notifier):
    """
    Notifier that posts JSON payloads to an HTTP webhook

    The receiving side is responsible for actual email delivery.
    """

    def __init__(self, webhook_url: str, timeout: float = 10.0):
        """
        Initialize webhook notifier

        Args:
            webhook_url: URL to POST payloads to
            timeout: Request timeout in seconds
        """
        self.webhook_url = webhook_url
        self.timeout = timeout

    async def _post(self, payload: dict) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                self.webhook_url,
                json=payload,
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
            return response

    async def send_email(self, message: EmailMessage) -> EmailResult:
        """
        Send an email request via webhook

        Returns:
            EmailResult; failures are reported, never raised
        """
        payload = {"type": "email", **asdict(message)}
        try:
            response = await self._post(payload)
            message_id = None
            if response.headers.get("content-type", "").startswith("application/json"):
                message_id = response.json().get("message_id")
            logger.info(f"Webhook email sent to {message.to} via {self.webhook_url}")
            return EmailResult(success=True, message_id=message_id)
        except httpx.HTTPError as e:
            logger.error(f"Failed to send webhook email to {message.to}: {e}")
            return EmailResult(success=False, error=str(e))
        except Exception as e:
            logger.error(f"Unexpected error sending webhook email to {message.to}: {e}")
            return EmailResult(success=False, error=str(e))

    async def create_notification(self, notification: Notification) -> None:
        payload = {"type": "notification", **asdict(notification)}
        try:
            await self._post(payload)
        except httpx.HTTPError as e:
            raise ExternalServiceError(
                "Failed to deliver notification",
                reason=f"{self.webhook_url}: {e}",
            )


class CompositeNotifier(Notifier):
    """
    Notifier that delegates to multiple notifiers

    Useful for sending to multiple channels (e.g., log + webhook).
    """

    def __init__(self, notifiers: List[Notifier]):
        self.notifiers = notifiers

    async def send_email(self, message: EmailMessage) -> EmailResult:
        """
        Send through every notifier

        Returns:
            The first successful result, otherwise the last failure
        """
        first_success = None
        last_failure = EmailResult(success=False, error="no notifiers configured")
        for notifier in self.notifiers:
            try:
                result = await notifier.send_email(message)
            except Exception as e:
                logger.error(f"Notifier {type(notifier).__name__} failed: {e}")
                result = EmailResult(success=False, error=str(e))
            if result.success and first_success is None:
                first_success = result
            elif not result.success:
                last_failure = result
        return first_success or last_failure

    async def create_notification(self, notification: Notification) -> None:
        errors = []
        for notifier in self.notifiers:
            try:
                await notifier.create_notification(notification)
            except Exception as e:
                logger.error(f"Notifier {type(notifier).__name__} failed: {e}")
                errors.append(str(e))
        if errors and len(errors) == len(self.notifiers):
            raise ExternalServiceError("Failed to deliver notification", reason="; ".join(errors))


def create_notifier(webhook_url: Optional[str] = None) -> Notifier:
    """
    Factory function to create the appropriate notifier

    Args:
        webhook_url: Optional webhook URL. If provided, creates a composite
                     notifier with logging + webhook. Otherwise, just logging.

    Returns:
        Configured Notifier
    """
    notifiers: List[Notifier] = [LoggingNotifier()]

    if webhook_url:
        notifiers.append(WebhookNotifier(webhook_url))

    if len(notifiers) == 1:
        return notifiers[0]

    return CompositeNotifier(notifiers)
