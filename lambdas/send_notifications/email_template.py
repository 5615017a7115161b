"""
METEO Notify Email Template
===========================
Builds the bulletin notification email.

The HTML is fixed French copy with the bulletin type and description
snippet interpolated as-is.
"""

from dataclasses import dataclass

from lambdas.common.constants import SITE_NAME, SITE_URL, SNIPPET_LINE_COUNT


@dataclass(frozen=True)
class NotificationMessage:
    subject: str
    html_body: str
    text_body: str


def build_subject(notification_type: str) -> str:
    return f"Nouveau {notification_type} publié par {SITE_NAME}"


def truncate_description(description: str, line_count: int = SNIPPET_LINE_COUNT) -> str:
    """
    Keep the first ``line_count`` lines and always append "...".

    e.g. "A\\nB\\nC\\nD" -> "A\\nB\\nC..." and "hi" -> "hi..."
    """
    return "\n".join(description.split("\n")[:line_count]) + "..."


def render_notification_html(notification_type: str, snippet: str) -> str:
    """
    Render the HTML body.

    Values are interpolated without HTML escaping.
    """
    return (
        f"<p>Un nouveau <strong>{notification_type}</strong> a été publié.</p>"
        f"<p><strong>Description :</strong></p>"
        f"<pre>{snippet}</pre>"
        f"<p>Pour plus d'informations, veuillez visiter le site officiel :</p>"
        f'<a href="{SITE_URL}">{SITE_NAME}</a>'
    )


def render_notification_text(notification_type: str, snippet: str) -> str:
    return f"""
Un nouveau {notification_type} a été publié.

Description :
{snippet}

Pour plus d'informations, veuillez visiter le site officiel : {SITE_URL}
    """.strip()


def compose_message(notification_type: str, description: str) -> NotificationMessage:
    """Build the message once; it is reused for every recipient."""
    snippet = truncate_description(description)
    return NotificationMessage(
        subject=build_subject(notification_type),
        html_body=render_notification_html(notification_type, snippet),
        text_body=render_notification_text(notification_type, snippet)
    )
