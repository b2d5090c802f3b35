"""SMTP 이메일 발송 (aiosmtplib).

Outbound e-mail for maintenance notifications. Sending is disabled when
SMTP_HOST or SMTP_USER is empty. Port 465 uses implicit TLS, any other
port upgrades with STARTTLS.
"""

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import aiosmtplib

from gearguard.config import settings

_IMPLICIT_TLS_PORT: int = 465


def smtp_configured() -> bool:
    """SMTP 계정이 설정되었는지 확인 (Whether SMTP credentials are present)."""
    return bool(settings.SMTP_HOST and settings.SMTP_USER)


def build_message(to: str, subject: str, html: str, text: str | None = None) -> MIMEMultipart:
    """알림 메일 메시지 구성: 플레인텍스트 대체 본문 + HTML.

    Build a multipart/alternative message; the HTML part comes last so
    clients prefer it.
    """
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = f"{settings.SMTP_FROM_NAME} <{settings.SMTP_FROM_EMAIL or settings.SMTP_USER}>"
    msg["To"] = to
    if text:
        msg.attach(MIMEText(text, "plain", "utf-8"))
    msg.attach(MIMEText(html, "html", "utf-8"))
    return msg


async def send_email(to: str, subject: str, html: str, text: str | None = None) -> None:
    """이메일 발송.

    Raises:
        aiosmtplib.SMTPException: SMTP 서버 오류 (Server rejected the message)
        OSError: 연결 실패 (Connection failure)
    """
    implicit_tls: bool = settings.SMTP_PORT == _IMPLICIT_TLS_PORT
    await aiosmtplib.send(
        build_message(to, subject, html, text),
        hostname=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        username=settings.SMTP_USER,
        password=settings.SMTP_PASSWORD,
        use_tls=implicit_tls,
        start_tls=not implicit_tls,
    )
