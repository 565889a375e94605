"""HTML bodies for transactional e-mails."""

from html import escape


def password_reset_email(code: str, ttl_minutes: int) -> tuple[str, str, str]:
    """Return (subject, text, html) for a password reset code."""
    subject = "Код для сброса пароля"
    text = (
        f"Ваш код для сброса пароля: {code}\n"
        f"Код действует {ttl_minutes} минут."
    )
    html = (
        '<div style="font-family: Arial, sans-serif; max-width: 480px">'
        "<h2>Сброс пароля</h2>"
        "<p>Ваш код для сброса пароля:</p>"
        f'<p style="font-size: 28px; font-weight: bold; letter-spacing: 6px">'
        f"{escape(code)}</p>"
        f"<p>Код действует {ttl_minutes} минут. "
        "Если вы не запрашивали сброс, просто проигнорируйте это письмо.</p>"
        "</div>"
    )
    return subject, text, html
