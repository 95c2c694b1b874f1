"""
Email Service using Resend

Sends account activation emails.

When EMAIL_ENABLED is false (demo and development setups) nothing is
sent: the activation link is logged and handed back to the caller so an
administrator can pass it on manually.
"""

import asyncio
import logging
from dataclasses import dataclass
from html import escape

import resend

from supchaissac.core.config import settings

logger = logging.getLogger(__name__)

resend.api_key = settings.resend_api_key

# Academic mail domains allowed to receive activation links
ALLOWED_DOMAINS = (
    "ac-lyon.fr",
    "ac-grenoble.fr",
    "ac-clermont.fr",
    "ac-aix-marseille.fr",
    "ac-nice.fr",
    "ac-montpellier.fr",
    "ac-toulouse.fr",
    "ac-bordeaux.fr",
    "ac-poitiers.fr",
    "ac-limoges.fr",
    "ac-nantes.fr",
    "ac-rennes.fr",
    "ac-caen.fr",
    "ac-normandie.fr",
    "ac-rouen.fr",
    "ac-amiens.fr",
    "ac-lille.fr",
    "ac-reims.fr",
    "ac-nancy-metz.fr",
    "ac-strasbourg.fr",
    "ac-besancon.fr",
    "ac-dijon.fr",
    "ac-orleans-tours.fr",
    "ac-paris.fr",
    "ac-versailles.fr",
    "ac-creteil.fr",
    "ac-martinique.fr",
    "ac-guadeloupe.fr",
    "ac-guyane.fr",
    "ac-reunion.fr",
    "ac-mayotte.fr",
    "ac-corse.fr",
    "education.gouv.fr",
)


@dataclass
class EmailResult:
    """Outcome of an email attempt. ``link`` is only set when the email was simulated."""

    sent: bool
    message: str
    link: str | None = None


def is_academic_email(email: str) -> bool:
    """True when the address belongs to an allowed academic domain."""
    _, _, domain = email.strip().lower().rpartition("@")
    if not domain:
        return False
    return any(domain == allowed or domain.endswith(f".{allowed}") for allowed in ALLOWED_DOMAINS)


def activation_link(token: str) -> str:
    return f"{settings.app_url.rstrip('/')}/activate?token={token}"


async def send_email(to_email: str, subject: str, html_content: str) -> bool:
    """
    Send an email using Resend.

    Returns:
        True if email was sent successfully
    """
    if not resend.api_key:
        logger.warning("RESEND_API_KEY not set - logging email instead of sending")
        logger.info(f"EMAIL TO: {to_email} | SUBJECT: {subject}")
        return True

    try:
        params: resend.Emails.SendParams = {
            "from": settings.email_from,
            "to": [to_email],
            "subject": subject,
            "html": html_content,
        }

        # Resend's client is synchronous
        email = await asyncio.to_thread(resend.Emails.send, params)
        logger.info(f"Email sent successfully to {to_email}, id: {email['id']}")
        return True
    except Exception as e:
        logger.error(f"Failed to send email to {to_email}: {e}")
        return False


def render_activation_email(name: str, link: str) -> str:
    safe_name = escape(name)
    safe_link = escape(link, quote=True)
    return f"""
    <!DOCTYPE html>
    <html>
    <head>
        <meta charset="utf-8">
        <style>
            body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
            .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
            .header {{ background: #7c3aed; color: white; padding: 30px; text-align: center; border-radius: 10px 10px 0 0; }}
            .content {{ background: #f9fafb; padding: 30px; border-radius: 0 0 10px 10px; }}
            .button {{ display: inline-block; background: #7c3aed; color: white; padding: 15px 30px; text-decoration: none; border-radius: 8px; font-weight: bold; margin: 20px 0; }}
            .footer {{ text-align: center; color: #6b7280; font-size: 12px; margin-top: 20px; }}
        </style>
    </head>
    <body>
        <div class="container">
            <div class="header"><h1>SupChaissac</h1></div>
            <div class="content">
                <p>Bonjour {safe_name},</p>

                <p>Un compte a été créé pour vous sur SupChaissac, l'application de
                déclaration des heures supplémentaires.</p>

                <p>Pour l'activer, choisissez votre mot de passe :</p>

                <a href="{safe_link}" class="button">Activer mon compte</a>

                <p>Ou copiez ce lien dans votre navigateur :</p>
                <p style="word-break: break-all; color: #6366f1;">{safe_link}</p>

                <p><strong>Ce lien expire dans 7 jours.</strong></p>
            </div>
            <div class="footer">
                <p>Si vous n'êtes pas concerné(e), ignorez simplement ce message.</p>
            </div>
        </div>
    </body>
    </html>
    """


async def send_activation_email(to_email: str, name: str, token: str) -> EmailResult:
    """
    Send the first-login activation link.

    Args:
        to_email: Recipient (the account username)
        name: Recipient display name
        token: Activation token

    Returns:
        EmailResult; in simulation mode it carries the link
    """
    link = activation_link(token)

    if not settings.email_enabled:
        logger.info(f"[EMAIL SIMULATION] activation link for {to_email}: {link}")
        return EmailResult(sent=False, message="Email simulé (envoi désactivé)", link=link)

    if not is_academic_email(to_email):
        logger.warning(f"Refusing to send activation email to non-academic address {to_email}")
        return EmailResult(sent=False, message="Adresse email non académique", link=link)

    sent = await send_email(
        to_email=to_email,
        subject="Activez votre compte SupChaissac",
        html_content=render_activation_email(name, link),
    )
    if not sent:
        return EmailResult(sent=False, message="Erreur lors de l'envoi de l'email")
    return EmailResult(sent=True, message="Email envoyé")
