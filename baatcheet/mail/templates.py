"""Email content builders for OTP messages."""

from dataclasses import dataclass
from html import escape

PRODUCT_NAME = "BaatCheet"
PRODUCT_LINK = "https://BaatCheet.com"

OUTRO = "Need help, or have questions? Just reply to this email, we'd love to help."


@dataclass
class MailContent:
    """A rendered message: subject plus text and HTML bodies."""
    subject: str
    text: str
    html: str


def _render_otp(
    name: str,
    intro: str,
    otp: str,
    subject: str,
    product_name: str,
    product_link: str
) -> MailContent:
    text = "\n".join([
        f"Hi {name},",
        "",
        intro,
        "",
        "Your One Time Password :",
        f"OTP: {otp}",
        "",
        OUTRO,
        "",
        f"{product_name} - {product_link}",
    ])

    html = f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"></head>
<body style="font-family: Arial, sans-serif; background: #f4f4f4; margin: 0; padding: 0;">
  <div style="max-width: 500px; margin: 40px auto; background: #fff; border-radius: 8px; padding: 32px;">
    <h2><a href="{escape(product_link)}">{escape(product_name)}</a></h2>
    <p>Hi {escape(name)},</p>
    <p>{escape(intro)}</p>
    <p>Your One Time Password :</p>
    <p style="font-size: 28px; font-weight: bold; letter-spacing: 6px;">OTP: {escape(otp)}</p>
    <p>{escape(OUTRO)}</p>
  </div>
</body>
</html>
"""
    return MailContent(subject=subject, text=text, html=html)


def otp_verification_content(
    username: str,
    otp: str,
    product_name: str = PRODUCT_NAME,
    product_link: str = PRODUCT_LINK
) -> MailContent:
    """Registration OTP email."""
    return _render_otp(
        name=username,
        intro=f"Welcome to {product_name}! Use the code below to verify your email. It is valid for 5 minutes.",
        otp=otp,
        subject="OTP Verification",
        product_name=product_name,
        product_link=product_link,
    )


def password_reset_content(
    username: str,
    otp: str,
    product_name: str = PRODUCT_NAME,
    product_link: str = PRODUCT_LINK
) -> MailContent:
    """Forgot-password OTP email."""
    return _render_otp(
        name=username,
        intro="We received a request to reset your password. Use the code below to choose a new one. It is valid for 5 minutes.",
        otp=otp,
        subject="Password Reset OTP",
        product_name=product_name,
        product_link=product_link,
    )
