"""
Minimal HTML bodies and subjects for transactional emails.
"""

import json
from html import escape
from typing import Any, Optional

TIER_LABELS = {
    "basic": "Basic Course",
    "premium": "Premium",
    "vip": "A+ Program (VIP)",
}


def _layout(heading: str, body: str, footer: str = "") -> str:
    return f"""
        <!DOCTYPE html>
        <html>
        <head>
            <meta charset="utf-8">
            <meta name="viewport" content="width=device-width, initial-scale=1.0">
        </head>
        <body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; background-color: #F5F7FA; padding: 40px 20px;">
            <div style="max-width: 560px; margin: 0 auto; background: white; border-radius: 16px; padding: 40px;">
                <h1 style="color: #1A1A2E; font-size: 22px; margin: 0 0 24px;">Web Launch Academy</h1>
                <h2 style="color: #1A1A2E; font-size: 20px; margin-bottom: 16px;">{heading}</h2>
                {body}
                <hr style="border: none; border-top: 1px solid #F1F3F5; margin: 32px 0;">
                <p style="color: #8B8BA7; font-size: 12px; text-align: center;">
                    {footer or "Questions? Just reply to this email."}
                </p>
            </div>
        </body>
        </html>
        """


def _button(url: str, label: str) -> str:
    return f"""
                <div style="text-align: center; margin: 32px 0;">
                    <a href="{escape(url, quote=True)}" style="display: inline-block; background: #2563EB; color: white; text-decoration: none; padding: 14px 32px; border-radius: 12px; font-weight: 500;">
                        {label}
                    </a>
                </div>"""


def _greeting(name: str) -> str:
    return f"Hi {escape(name)}," if name else "Hi there,"


def payment_confirmation_subject(tier: str) -> str:
    return f"Welcome to Web Launch Academy - {TIER_LABELS.get(tier, tier.title())} confirmed"


def render_payment_confirmation(
    customer_name: str,
    tier: str,
    sessions: int,
    portal_url: str,
    reset_link: Optional[str] = None,
) -> str:
    """Course purchase confirmation, with a set-password link for new accounts."""
    sessions_html = ""
    if sessions > 0:
        sessions_html = f"""
                <p style="color: #4A4A68; line-height: 1.6;">
                    Your purchase includes <strong>{sessions} LevelUp sessions</strong>.
                </p>"""

    access_html = _button(f"{portal_url}/portal", "Go to the Student Portal")
    if reset_link:
        access_html = f"""
                <p style="color: #4A4A68; line-height: 1.6;">
                    We created your account. Choose a password to sign in:
                </p>{_button(reset_link, "Set Your Password")}"""

    body = f"""
                <p style="color: #4A4A68; line-height: 1.6;">
                    {_greeting(customer_name)}<br><br>
                    Your payment for <strong>{escape(TIER_LABELS.get(tier, tier))}</strong> went through.
                </p>{sessions_html}{access_html}"""
    return _layout("Payment confirmed", body)


def ai_premium_subject() -> str:
    return "Your AI Premium upgrade is active"


def render_ai_premium_purchase(credits: int, model_tier: str, retention_days: int, site_url: str) -> str:
    body = f"""
                <p style="color: #4A4A68; line-height: 1.6;">
                    Thanks for upgrading! Your account now has <strong>{credits} AI credits</strong>
                    using the {escape(model_tier.title())} model.
                </p>
                <p style="color: #4A4A68; line-height: 1.6;">
                    Your demo project will be kept for {retention_days} days.
                </p>{_button(f"{site_url}/demo", "Continue Building")}"""
    return _layout("AI Premium unlocked", body)


def textbook_subject() -> str:
    return "Your Web Launch Academy textbook"


def render_textbook_purchase(site_url: str) -> str:
    body = f"""
                <p style="color: #4A4A68; line-height: 1.6;">
                    Thanks for buying the textbook. It is available in your account now.
                </p>{_button(f"{site_url}/portal/textbook", "Read the Textbook")}"""
    return _layout("Textbook purchase confirmed", body)


def toolkit_subject(product_name: str) -> str:
    return f"Your {product_name} is ready"


def render_toolkit_purchase(product_name: str, site_url: str) -> str:
    body = f"""
                <p style="color: #4A4A68; line-height: 1.6;">
                    You now have lifetime access to <strong>{escape(product_name)}</strong>.
                </p>{_button(f"{site_url}/portal/products", "Open the Toolkit")}"""
    return _layout("Purchase confirmed", body)


SEVERITY_COLORS = {"critical": "#DC2626", "high": "#F59E0B"}


def error_alert_subject(severity: str, location: str) -> str:
    return f"[{severity.upper()}] {location}"


def render_error_alert(
    severity: str,
    location: str,
    message: str,
    timestamp: str,
    environment: str,
    user_id: Optional[str] = None,
    traceback_text: Optional[str] = None,
    additional_info: Optional[dict[str, Any]] = None,
) -> str:
    """Operator alert body; every dynamic value is HTML-escaped."""
    color = SEVERITY_COLORS.get(severity, "#F59E0B")
    rows = [
        ("Location", location),
        ("Timestamp", timestamp),
        ("Environment", environment),
    ]
    if user_id:
        rows.append(("User ID", user_id))
    rows.append(("Error", message or "No message provided"))

    details = "".join(
        f'<p style="margin: 4px 0;"><strong>{label}:</strong> {escape(str(value))}</p>'
        for label, value in rows
    )
    code_blocks = ""
    if traceback_text:
        code_blocks += f'<pre style="background: #1F2937; color: #F9FAFB; padding: 12px; overflow-x: auto; font-size: 12px;">{escape(traceback_text)}</pre>'
    if additional_info:
        pretty = json.dumps(additional_info, indent=2, default=str)
        code_blocks += f'<pre style="background: #1F2937; color: #F9FAFB; padding: 12px; overflow-x: auto; font-size: 12px;">{escape(pretty)}</pre>'

    body = f"""
                <div style="border-left: 4px solid {color}; padding-left: 16px;">{details}</div>
                {code_blocks}"""
    return _layout(
        f"{severity.upper()} error detected",
        body,
        footer="Automated alert from Web Launch Academy error monitoring",
    )
