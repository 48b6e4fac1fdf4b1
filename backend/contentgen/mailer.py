import html
import logging

import httpx

from contentgen.core.config import settings

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


class EmailError(Exception):
    pass


def invitation_link(token: str) -> str:
    return f"{settings.FRONTEND_HOST.rstrip('/')}/dashboard?invitation={token}"


def render_invitation_email(*, team_name: str, inviter_name: str, role: str, token: str) -> tuple[str, str]:
    """Returns (subject, html body)."""
    subject = f"{inviter_name} invited you to join {team_name} on {settings.PROJECT_NAME}"
    body = f"""<!DOCTYPE html>
<html>
  <body>
    <h1>You've been invited to collaborate!</h1>
    <p><strong>{html.escape(inviter_name)}</strong> has invited you to join
    <strong>{html.escape(team_name)}</strong> on {html.escape(settings.PROJECT_NAME)}.</p>
    <p>You'll be joining as a <strong>{html.escape(role)}</strong>.</p>
    <p><a href="{html.escape(invitation_link(token))}">Accept Invitation</a></p>
    <p>This invitation will expire in {settings.INVITATION_EXPIRE_DAYS} days.
    If you didn't expect this invitation, you can safely ignore this email.</p>
  </body>
</html>
"""
    return subject, body


async def send_invitation_email(
    *,
    email: str,
    team_name: str,
    inviter_name: str,
    role: str,
    token: str,
    transport: httpx.AsyncBaseTransport | None = None,
) -> bool:
    """Send through Resend. Returns False, without raising, when email is not configured."""
    if not settings.RESEND_API_KEY:
        logger.warning("RESEND_API_KEY not configured; skipping invitation email to %s", email)
        return False

    subject, body = render_invitation_email(team_name=team_name, inviter_name=inviter_name, role=role, token=token)
    async with httpx.AsyncClient(transport=transport, timeout=30.0) as client:
        response = await client.post(
            RESEND_API_URL,
            headers={"Authorization": f"Bearer {settings.RESEND_API_KEY}"},
            json={"from": settings.INVITATION_FROM_EMAIL, "to": [email], "subject": subject, "html": body},
        )
    if response.is_error:
        try:
            message = response.json().get("message")
        except ValueError:
            message = None
        logger.error("Resend API error %s: %s", response.status_code, message or response.text)
        raise EmailError(message or "Failed to send email")

    logger.info("Invitation email sent to %s", email)
    return True
