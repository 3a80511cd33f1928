# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Email notification channel using async SMTP.

This channel sends email notifications using aiosmtplib for async SMTP
communication. Each email carries both a plain text and an HTML part.

Configuration comes from AlertSettings (``ALERT_*`` environment variables):
- ALERT_SMTP_HOST: SMTP server hostname
- ALERT_SMTP_PORT: SMTP server port (default: 587)
- ALERT_SMTP_USERNAME: SMTP authentication username
- ALERT_SMTP_PASSWORD: SMTP authentication password
- ALERT_SMTP_USE_TLS: Use STARTTLS (default: true)
- ALERT_FROM_EMAIL: Sender email address
- ALERT_FROM_NAME: Sender display name
"""

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid
from html import escape

import aiosmtplib

from expertchat.core.config.settings import AlertSettings
from expertchat.infrastructure.notifications.channels.base import (
    BaseChannel,
    ChannelResult,
    ChannelType,
    NotificationPayload,
)


class EmailChannel(BaseChannel):
    """Email notification channel using async SMTP.

    Sends nothing (and reports SKIPPED) until the SMTP settings are
    complete, so a development setup without mail still runs.
    """

    def __init__(self, settings: AlertSettings) -> None:
        """Initialize the email channel.

        Args:
            settings: SMTP and sender configuration.
        """
        super().__init__()
        self._settings = settings

    @property
    def channel_type(self) -> ChannelType:
        """Return the channel type."""
        return ChannelType.EMAIL

    async def send(self, payload: NotificationPayload) -> ChannelResult:
        """Send email notification via SMTP.

        Args:
            payload: The notification payload.

        Returns:
            ChannelResult with delivery status.
        """
        if not self._settings.is_configured:
            self.logger.warning(
                "Email notifications disabled: ALERT_SMTP_HOST, ALERT_SMTP_USERNAME, "
                "ALERT_SMTP_PASSWORD, or ALERT_FROM_EMAIL not set"
            )
            return self.create_skipped_result("SMTP configuration incomplete")

        if not payload.recipient_email:
            return self.create_skipped_result("No recipient email address")

        message = self.build_message(payload)
        password = self._settings.smtp_password

        try:
            await aiosmtplib.send(
                message,
                hostname=self._settings.smtp_host,
                port=self._settings.smtp_port,
                username=self._settings.smtp_username,
                password=password.get_secret_value() if password else None,
                start_tls=self._settings.smtp_use_tls,
                timeout=self._settings.timeout,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            self.logger.error(
                "Failed to send email to %s: %s",
                payload.recipient_email,
                str(e),
                exc_info=True,
            )
            return self.create_failure_result(
                f"SMTP error: {str(e)}",
                metadata={"recipient": payload.recipient_email},
            )

        self.logger.info("Email sent to %s: %s", payload.recipient_email, payload.title)

        return self.create_success_result(
            message_id=message["Message-ID"],
            metadata={"recipient": payload.recipient_email},
        )

    def build_message(self, payload: NotificationPayload) -> MIMEMultipart:
        """Build the MIME email message.

        Args:
            payload: Notification payload.

        Returns:
            MIMEMultipart message ready to send.
        """
        message = MIMEMultipart("alternative")

        message["From"] = f"{self._settings.from_name} <{self._settings.from_email}>"
        message["To"] = payload.recipient_email or ""
        message["Subject"] = payload.title
        message["Message-ID"] = make_msgid()

        message.attach(MIMEText(self._build_plain_text(payload), "plain", "utf-8"))
        message.attach(MIMEText(self._build_html(payload), "html", "utf-8"))

        return message

    def _build_plain_text(self, payload: NotificationPayload) -> str:
        lines = [
            payload.title,
            "=" * len(payload.title),
            "",
            payload.message,
            "",
        ]

        for label, value in payload.data.items():
            lines.append(f"{label}: {value if value is not None else '-'}")

        lines.extend([
            "",
            "---",
            f"This notification was sent by {self._settings.from_name}.",
        ])

        return "\n".join(lines)

    def _build_html(self, payload: NotificationPayload) -> str:
        title = escape(payload.title)
        message = escape(payload.message).replace("\n", "<br>")
        from_name = escape(self._settings.from_name)

        rows = "".join(
            f"""
                <tr>
                    <td style="padding: 4px 12px 4px 0; color: #6B7280; vertical-align: top;">
                        <strong>{escape(str(label))}</strong>
                    </td>
                    <td style="padding: 4px 0;">{escape(str(value)) if value is not None else "-"}</td>
                </tr>"""
            for label, value in payload.data.items()
        )

        html = f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto,
             'Helvetica Neue', Arial, sans-serif; line-height: 1.6;
             color: #1F2937; margin: 0; padding: 0; background-color: #F3F4F6;">
    <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
        <div style="background-color: white; border-radius: 8px; padding: 32px;">
            <h1 style="color: #B91C1C; font-size: 22px; margin: 0 0 16px 0;">{title}</h1>
            <p style="margin: 0 0 16px 0;">{message}</p>
            <table style="border-collapse: collapse; font-size: 14px;">{rows}
            </table>
            <p style="border-top: 1px solid #E5E7EB; padding-top: 16px; margin-top: 24px;
                      font-size: 12px; color: #9CA3AF;">
                This notification was sent by {from_name}.
            </p>
        </div>
    </div>
</body>
</html>
        """

        return html.strip()
