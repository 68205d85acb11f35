import asyncio
import html
import logging
import smtplib
from concurrent.futures import ThreadPoolExecutor
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from jobboard.config import Settings

logger = logging.getLogger(__name__)

# SMTP configuration for the common providers; anything else uses SMTP_HOST/SMTP_PORT
SMTP_PROVIDERS = {
    'gmail': {'host': 'smtp.gmail.com', 'port': 587, 'use_tls': True},
    'outlook': {'host': 'smtp-mail.outlook.com', 'port': 587, 'use_tls': True},
    'yahoo': {'host': 'smtp.mail.yahoo.com', 'port': 587, 'use_tls': True},
    'office365': {'host': 'smtp.office365.com', 'port': 587, 'use_tls': True},
}


def detect_email_provider(email_address):
    """Auto-detect email provider from email address"""
    email_lower = email_address.lower()
    if '@gmail.com' in email_lower:
        return 'gmail'
    elif '@outlook.com' in email_lower or '@hotmail.com' in email_lower:
        return 'outlook'
    elif '@yahoo.com' in email_lower:
        return 'yahoo'
    else:
        return 'custom'


class Mailer:
    """
    Fire-and-forget email delivery.

    Messages are sent on a small thread pool; the request that triggered the
    message never waits for, or fails because of, delivery.
    """

    def __init__(self, settings: Settings, max_workers: int = 3):
        self.settings = settings
        self.max_workers = max_workers
        self.executor = None

    def start(self):
        if self.executor is None:
            self.executor = ThreadPoolExecutor(max_workers=self.max_workers)
        return self.executor

    def smtp_config(self):
        provider = self.settings.mail_provider
        if provider == 'auto':
            provider = detect_email_provider(self.settings.mail_username)
        custom = {'host': self.settings.smtp_host, 'port': self.settings.smtp_port, 'use_tls': True}
        return SMTP_PROVIDERS.get(provider, custom)

    def send_sync(self, to_email, subject, html_content, text_content=None):
        """Send one message via SMTP. Returns False instead of raising."""
        sender_email = self.settings.mail_username
        sender_password = self.settings.mail_password

        if not sender_email or not sender_password:
            logger.warning("Email credentials not configured; logging message instead")
            self.log_email(to_email, subject, text_content)
            return False

        smtp_config = self.smtp_config()

        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = f"{self.settings.mail_from_name} <{sender_email}>"
        message["To"] = to_email

        if text_content:
            message.attach(MIMEText(text_content, "plain"))
        message.attach(MIMEText(html_content, "html"))

        try:
            with smtplib.SMTP(smtp_config['host'], smtp_config['port'], timeout=30) as server:
                server.ehlo()
                if smtp_config['use_tls']:
                    server.starttls()
                    server.ehlo()

                server.login(sender_email, sender_password)
                server.send_message(message)

            logger.info("Email sent to %s", to_email)
            return True

        except (smtplib.SMTPException, OSError) as e:
            logger.error("Email to %s failed: %s", to_email, e)
            self.log_email(to_email, subject, text_content)
            return False

    @staticmethod
    def log_email(to_email, subject, text_content):
        logger.info("EMAIL (console mode) to=%s subject=%r\n%s", to_email, subject, text_content or "")

    def dispatch(self, to_email, subject, html_content, text_content=None):
        """Schedule delivery and return immediately. Returns None if nothing was scheduled."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        try:
            executor = self.start()
            if loop is None:
                future = executor.submit(self.send_sync, to_email, subject, html_content, text_content)
            else:
                future = loop.run_in_executor(
                    executor, self.send_sync, to_email, subject, html_content, text_content
                )
        except RuntimeError as e:
            logger.error("Email to %s could not be scheduled: %s", to_email, e)
            self.log_email(to_email, subject, text_content)
            return None
        future.add_done_callback(self._report)
        return future

    @staticmethod
    def _report(future):
        if not future.cancelled() and future.exception() is not None:
            logger.error("Email dispatch crashed: %s", future.exception())

    def send_verification_email(self, user: dict, link: str):
        name = user.get("name", "User")
        subject = "Verify your email address"

        text_content = f"""
Hello {name},

Please confirm your email address by opening the link below:

{link}

This link is valid for 24 hours.

---
JobBoard
    """

        html_content = f"""
<!DOCTYPE html>
<html>
<body style="margin:0;padding:0;font-family:Arial,sans-serif;background:#f5f7fa;">
    <table width="100%" cellpadding="0" cellspacing="0" style="padding:40px 20px;">
        <tr><td align="center">
            <table width="600" cellpadding="0" cellspacing="0" style="background:#fff;border-radius:12px;">
                <tr>
                    <td style="padding:40px 30px;">
                        <p style="font-size:16px;color:#2d3748;">Hello <strong>{html.escape(name)}</strong>,</p>
                        <p style="font-size:15px;color:#4a5568;">Please confirm your email address:</p>
                        <p><a href="{html.escape(link)}" style="background:#667eea;color:#fff;padding:12px 24px;border-radius:6px;text-decoration:none;">Verify email</a></p>
                        <p style="font-size:14px;color:#718096;">This link is valid for <strong>24 hours</strong>.</p>
                    </td>
                </tr>
            </table>
        </td></tr>
    </table>
</body>
</html>
    """

        return self.dispatch(user["email"], subject, html_content, text_content)

    def shutdown(self):
        if self.executor is not None:
            self.executor.shutdown(wait=False)
            self.executor = None
