# ------------------------------ IMPORTS ------------------------------
from html import escape
from typing import Optional
import logging

import requests
from fastapi import BackgroundTasks, Depends

from core.config.settings import settings

# ------------------------------ LOGGING ------------------------------
logger = logging.getLogger(__name__)

# ------------------------------ EMAIL SERVICE ------------------------------

class EmailService:
    """Best-effort transactional email over the SendGrid HTTP API.

    Delivery failures are logged and swallowed: callers send mail after their
    transaction has committed and never depend on the outcome.
    """

    def __init__(self, config=None, session: Optional[requests.Session] = None):
        self.config = config or settings.email
        self.session = session or requests.Session()

    def send(self, to_email: Optional[str], subject: str, html: str) -> bool:
        """Send one HTML message. Returns whether the provider accepted it."""
        if not to_email:
            logger.warning(f"Skipping email '{subject}': no recipient")
            return False

        if not self.config.enabled:
            logger.info(f"Email disabled, would send '{subject}' to {to_email}")
            return False

        payload = {
            "personalizations": [{"to": [{"email": to_email}]}],
            "from": {"email": self.config.from_email, "name": self.config.from_name},
            "subject": subject,
            "content": [{"type": "text/html", "value": html}],
        }
        headers = {
            "Authorization": f"Bearer {self.config.sendgrid_api_key}",
            "Content-Type": "application/json",
        }

        try:
            response = self.session.post(
                self.config.api_url,
                json=payload,
                headers=headers,
                timeout=self.config.timeout
            )
            response.raise_for_status()
            logger.info(f"Sent '{subject}' to {to_email}")
            return True

        except requests.RequestException as e:
            logger.error(f"Failed to send '{subject}' to {to_email}: {e}")
            return False

    # ------------------------------ ACCOUNT EMAILS ------------------------------

    def send_welcome(self, to_email: str, username: str) -> bool:
        return self.send(
            to_email,
            "Welcome to FCF Motors",
            f"<p>Hello {escape(username)},</p><p>Your FCF Motors account is ready.</p>"
        )

    def send_password_reset(self, to_email: str, token: str) -> bool:
        link = f"{self.config.app_base_url}/reset-password?token={token}"
        return self.send(
            to_email,
            "Reset your FCF Motors password",
            f"<p>Use the link below to choose a new password. It expires in "
            f"{settings.security.reset_token_expire_minutes} minutes.</p>"
            f'<p><a href="{escape(link)}">{escape(link)}</a></p>'
        )

    def send_account_deleted(self, to_email: str, username: str) -> bool:
        return self.send(
            to_email,
            "Your FCF Motors account was deleted",
            f"<p>Hello {escape(username)},</p><p>Your account and its listings have been removed.</p>"
        )

    # ------------------------------ SUBSCRIPTION EMAILS ------------------------------

    def send_subscription_confirmation(self, to_email: str, plan_name: str, expiry_date) -> bool:
        return self.send(
            to_email,
            "Subscription confirmed",
            f"<p>Your <strong>{escape(plan_name)}</strong> subscription is active until {expiry_date}.</p>"
        )

    def send_subscription_cancelled(self, to_email: str, plan_name: str) -> bool:
        return self.send(
            to_email,
            "Subscription cancelled",
            f"<p>Your <strong>{escape(plan_name)}</strong> subscription has been cancelled.</p>"
        )

    def send_subscription_renewed(self, to_email: str, plan_name: str, expiry_date) -> bool:
        return self.send(
            to_email,
            "Subscription renewed",
            f"<p>Your <strong>{escape(plan_name)}</strong> subscription was renewed until {expiry_date}.</p>"
        )

    def send_subscription_expired(self, to_email: str, plan_name: str) -> bool:
        return self.send(
            to_email,
            "Subscription expired",
            f"<p>Your <strong>{escape(plan_name)}</strong> subscription has expired.</p>"
        )

    # ------------------------------ MESSAGE EMAILS ------------------------------

    def send_private_message(self, to_email: str, listing_title: str, message: str) -> bool:
        return self.send(
            to_email,
            f"New message about {listing_title}",
            f"<p>A buyer sent you a message about <strong>{escape(listing_title)}</strong>:</p>"
            f"<blockquote>{escape(message or '')}</blockquote>"
        )

    def send_private_message_response(self, to_email: str, listing_title: str, response: str) -> bool:
        return self.send(
            to_email,
            f"Reply about {listing_title}",
            f"<p>You have a reply about <strong>{escape(listing_title)}</strong>:</p>"
            f"<blockquote>{escape(response or '')}</blockquote>"
        )

    def send_quote_request(self, to_email: str, listing_title: str, requester_email: str) -> bool:
        return self.send(
            to_email,
            f"Quote request for {listing_title}",
            f"<p>{escape(requester_email or 'A visitor')} requested a quote for "
            f"<strong>{escape(listing_title)}</strong>.</p>"
        )

    def send_quote_response(self, to_email: str, listing_title: str, response: str) -> bool:
        return self.send(
            to_email,
            f"Your quote for {listing_title}",
            f"<p>The dealer answered your quote request for <strong>{escape(listing_title)}</strong>:</p>"
            f"<blockquote>{escape(response or '')}</blockquote>"
        )

# ------------------------------ QUEUED EMAIL SERVICE ------------------------------

class QueuedEmailService(EmailService):
    """Queues each message on a request's background tasks instead of sending it inline.

    The wrapped service delivers the queued messages once the response has gone out.
    """

    def __init__(self, delegate: EmailService, tasks: BackgroundTasks):
        self.config = delegate.config
        self.session = delegate.session
        self.delegate = delegate
        self.tasks = tasks

    def send(self, to_email: Optional[str], subject: str, html: str) -> bool:
        self.tasks.add_task(self.delegate.send, to_email, subject, html)
        return True

# ------------------------------ DEPENDENCY ------------------------------
email_service = EmailService()

def get_email_service() -> EmailService:
    """Dependency returning the shared email service."""
    return email_service

def get_queued_email_service(
    background_tasks: BackgroundTasks,
    email: EmailService = Depends(get_email_service)
) -> EmailService:
    """Dependency for request handlers: mail is delivered after the response."""
    return QueuedEmailService(email, background_tasks)

# ------------------------------ END OF FILE ------------------------------
