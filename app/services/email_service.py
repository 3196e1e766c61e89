"""Transactional email delivery over an HTTP email API."""

import logging
from html import escape

import httpx

from app.core.config import settings
from app.models.enums import ApplicationStatus

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """Email API rejected a message."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(message)


class EmailNotifier:
    """Sends templated emails; callers dispatch these as best-effort side effects."""

    def __init__(
        self,
        api_url: str | None = settings.email_api_url,
        api_key: str | None = settings.email_api_key,
        sender: str = settings.email_from,
        timeout: float = settings.email_timeout,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.sender = sender
        self.timeout = timeout
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.api_url)

    async def send(self, to: str, subject: str, html: str) -> bool:
        """Send one message. Returns False when delivery is not configured."""
        if not self.enabled:
            logger.info(f"Email delivery disabled, skipping '{subject}' to {to}")
            return False

        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout), transport=self._transport
        ) as client:
            response = await client.post(
                self.api_url,
                json={"from": self.sender, "to": [to], "subject": subject, "html": html},
                headers=headers,
            )

        if response.status_code >= 400:
            raise EmailDeliveryError(
                response.status_code,
                f"Email API returned {response.status_code}: {response.text[:200]}",
            )

        logger.info(f"Email '{subject}' sent to {to}")
        return True

    async def send_new_application_to_employer(
        self,
        to: str,
        employer_name: str,
        job_title: str,
        candidate_name: str,
        candidate_email: str,
    ) -> bool:
        subject = f"New application for {job_title}"
        html = (
            f"<p>Hello {escape(employer_name)},</p>"
            f"<p>{escape(candidate_name or 'A candidate')} ({escape(candidate_email)}) "
            f"applied for <strong>{escape(job_title)}</strong>.</p>"
            "<p>Sign in to your dashboard to review the application.</p>"
        )
        return await self.send(to, subject, html)

    async def send_application_submitted(
        self,
        to: str,
        candidate_name: str,
        job_title: str,
        company_name: str,
        warning: str | None = None,
    ) -> bool:
        subject = f"Application submitted: {job_title}"
        html = (
            f"<p>Hi {escape(candidate_name or 'there')},</p>"
            f"<p>Your application for <strong>{escape(job_title)}</strong> at "
            f"{escape(company_name)} has been received.</p>"
        )
        if warning:
            html += f"<p><strong>{escape(warning)}</strong></p>"
        return await self.send(to, subject, html)

    async def send_status_update(
        self,
        to: str,
        candidate_name: str,
        job_title: str,
        company_name: str,
        status: ApplicationStatus,
    ) -> bool:
        subject = f"Application update: {status.value} - {job_title}"
        html = (
            f"<p>Hi {escape(candidate_name or 'there')},</p>"
            f"<p>Your application for <strong>{escape(job_title)}</strong> at "
            f"{escape(company_name)} is now <strong>{escape(status.value)}</strong>.</p>"
        )
        return await self.send(to, subject, html)
