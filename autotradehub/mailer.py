import html
import logging
from typing import Dict, Optional

import httpx

from .config import Settings, settings as default_settings
from .errors import EmailDeliveryError

logger = logging.getLogger(__name__)


def render_reset_password(name: str, reset_link: str, support_email: str) -> str:
    name, reset_link = html.escape(name), html.escape(reset_link)
    return f"""
      <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; background: #f8f9fa; padding: 20px;">
        <div style="background: white; padding: 30px; border-radius: 10px;">
          <h1 style="color: #333; text-align: center;">AutoTradeHub</h1>
          <h2 style="color: #333;">Hi {name},</h2>
          <p style="color: #666; line-height: 1.6;">
            We received a request to reset your password. Click the button below to create a new password:
          </p>
          <p style="text-align: center; margin: 30px 0;">
            <a href="{reset_link}" style="background: #007bff; color: white; padding: 12px 30px; text-decoration: none; border-radius: 5px;">
              Reset Password
            </a>
          </p>
          <p style="color: #666; font-size: 14px;">This link will expire in 1 hour for security reasons.</p>
          <p style="color: #666; font-size: 14px; border-top: 1px solid #eee; padding-top: 20px;">
            If you didn't request this password reset, please ignore this email or contact support at {support_email}
          </p>
        </div>
      </div>
    """


def render_contact(name: str, email: str, subject: str, message: str) -> str:
    name, email, subject, message = (html.escape(v) for v in (name, email, subject, message))
    return f"""
      <div style="font-family: Arial, sans-serif;">
        <h2>New contact form message</h2>
        <p><strong>From:</strong> {name} &lt;{email}&gt;</p>
        <p><strong>Subject:</strong> {subject}</p>
        <p style="white-space: pre-wrap;">{message}</p>
      </div>
    """


class Mailer:
    """
    Sends transactional email through the Resend HTTP API. Without an API key
    the message is logged instead, so local setups still get the reset link.
    """

    def __init__(self, config: Optional[Settings] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config or default_settings
        self.transport = transport

    async def send(self, to: str, subject: str, body: str, reply_to: Optional[str] = None) -> Dict[str, str]:
        if not self.config.RESEND_API_KEY:
            logger.info("Email service not configured; logging email to=%s subject=%r", to, subject)
            return {"delivered": "false"}

        payload = {"from": self.config.EMAIL_FROM, "to": [to], "subject": subject, "html": body}
        if reply_to:
            payload["reply_to"] = reply_to
        headers = {"Authorization": f"Bearer {self.config.RESEND_API_KEY}"}
        try:
            async with httpx.AsyncClient(timeout=self.config.HTTP_TIMEOUT, transport=self.transport) as client:
                r = await client.post(self.config.RESEND_API_URL, json=payload, headers=headers)
                r.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Email delivery to %s failed: %s", to, e)
            raise EmailDeliveryError(f"Failed to send email: {subject}")
        logger.info("Email sent to %s subject=%r", to, subject)
        return {"delivered": "true"}

    async def send_password_reset(self, to: str, name: str, reset_link: str) -> Dict[str, str]:
        body = render_reset_password(name, reset_link, self.config.SUPPORT_EMAIL)
        result = await self.send(to, "Reset Your AutoTradeHub Password", body)
        if result["delivered"] == "true":
            return {"message": "Password reset email sent successfully!"}
        logger.info("Password reset link for %s (%s): %s", to, name, reset_link)
        return {
            "message": "Password reset email logged successfully!",
            "note": "Email service not configured. Check logs for reset link.",
        }

    async def send_contact(self, name: str, email: str, subject: str, message: str) -> Dict[str, str]:
        body = render_contact(name, email, subject, message)
        result = await self.send(self.config.SUPPORT_EMAIL, f"Contact form: {subject}", body, reply_to=email)
        if result["delivered"] == "true":
            return {"message": "Message sent successfully!"}
        return {
            "message": "Message logged successfully!",
            "note": "Email service not configured. Check logs for the message.",
        }
