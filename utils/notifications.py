from html import escape

from flask import current_app

from utils.emailer import send_email

SIGNATURE = "Best regards,\nTrashToCash Team"


def _support_inbox():
    return current_app.config.get("SUPPORT_EMAIL") or current_app.config.get("SMTP_FROM_EMAIL")


def _html(title: str, paragraphs) -> str:
    body = "".join(f"<p>{escape(p).replace(chr(10), '<br>')}</p>" for p in paragraphs)
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        f'<h2 style="color: #4CAF50;">{escape(title)}</h2>{body}</div>'
    )


def contact_received(contact) -> dict:
    """Confirmation to the submitter and a heads-up to the support inbox."""
    results = {}

    lines = [
        f"Dear {contact.name},",
        "We have received your message and will get back to you within 24 hours.",
        f"Subject: {contact.subject}\nCategory: {contact.category}\nMessage: {contact.message}",
        SIGNATURE,
    ]
    results["submitter"] = send_email(
        contact.email,
        "Thank you for contacting TrashToCash",
        "\n\n".join(lines),
        html=_html("Thank You for Contacting Us!", lines),
    )[0]

    inbox = _support_inbox()
    if inbox:
        lines = [
            f"Name: {contact.name}\nEmail: {contact.email}\nPhone: {contact.phone}",
            f"Subject: {contact.subject}\nCategory: {contact.category}",
            f"Message:\n{contact.message}",
            f"Contact ID: {contact.id}",
        ]
        results["support"] = send_email(
            inbox,
            f"New Contact Form Submission - {contact.category}",
            "\n\n".join(lines),
            html=_html("New Contact Form Submission", lines),
        )[0]

    return results


def contact_answered(contact) -> bool:
    lines = [
        f"Dear {contact.name},",
        "Thank you for contacting TrashToCash. Here is our response to your inquiry:",
        f"Your original message ({contact.subject}):\n{contact.message}",
        f"Our response:\n{contact.response_message}",
        SIGNATURE,
    ]
    sent, _ = send_email(
        contact.email,
        f"Re: {contact.subject}",
        "\n\n".join(lines),
        html=_html("Response to Your Inquiry", lines),
    )
    return sent
