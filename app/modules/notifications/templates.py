"""Email subjects, built-in templates and placeholder rendering.

Everything here is pure: subject generation, payload formatting and
placeholder substitution never touch the network and never raise for a
missing or oddly-typed payload field.
"""

import html
import re
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, Mapping, Optional

import pytz

from modules.notifications.models import NotificationType

GENERIC_TEMPLATE_NAME = "generic.html"
GENERIC_SUBJECT = "Inferno Bank notification"
DISPLAY_DATE_FORMAT = "%d %B %Y %H:%M"

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([A-Za-z0-9_.\-]+)\s*\}\}")

TEMPLATE_MAPPING: Dict[NotificationType, str] = {
    NotificationType.WELCOME: "welcome.html",
    NotificationType.USER_LOGIN: "user-login.html",
    NotificationType.USER_UPDATE: "user-update.html",
    NotificationType.CARD_CREATE: "card-create.html",
    NotificationType.CARD_ACTIVATE: "card-activate.html",
    NotificationType.TRANSACTION_PURCHASE: "transaction-purchase.html",
    NotificationType.TRANSACTION_SAVE: "transaction-save.html",
    NotificationType.TRANSACTION_PAID: "transaction-paid.html",
    NotificationType.REPORT_ACTIVITY: "report-activity.html",
}


def _amount(payload: Mapping[str, Any]) -> Any:
    return payload.get("amount") or 0


SUBJECTS: Dict[NotificationType, Callable[[Mapping[str, Any]], str]] = {
    NotificationType.WELCOME: lambda p: "Welcome to Inferno Bank!",
    NotificationType.USER_LOGIN: lambda p: "New sign-in to your account",
    NotificationType.USER_UPDATE: lambda p: "Your account information was updated",
    NotificationType.CARD_CREATE: lambda p: f"New {p.get('type') or ''} card created",
    NotificationType.CARD_ACTIVATE: lambda p: "Card activated successfully",
    NotificationType.TRANSACTION_PURCHASE: lambda p: f"Purchase made - ${_amount(p)}",
    NotificationType.TRANSACTION_SAVE: lambda p: f"Deposit made - ${_amount(p)}",
    NotificationType.TRANSACTION_PAID: lambda p: f"Payment processed - ${_amount(p)}",
    NotificationType.REPORT_ACTIVITY: lambda p: "Your activity report is available",
}


def _page(title: str, content: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <title>{title}</title>
</head>
<body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; background-color: #f5f5f5;">
  <div style="background-color: white; border-radius: 10px; padding: 30px;">
    <h1 style="color: #e74c3c; text-align: center;">INFERNO BANK</h1>
{content}
    <p style="color: #7f8c8d; font-size: 14px; text-align: center; margin-top: 25px;">
      Thank you for banking with Inferno Bank
    </p>
  </div>
</body>
</html>
"""


DEFAULT_TEMPLATES: Dict[NotificationType, str] = {
    NotificationType.WELCOME: _page(
        "Welcome to Inferno Bank!",
        """    <h2 style="color: #2c3e50;">Welcome {{fullName}}!</h2>
    <p>Your account was created on {{date}}. You can now request debit and
    credit cards, make secure transactions and follow your activity in real
    time.</p>""",
    ),
    NotificationType.USER_LOGIN: _page(
        "New sign-in to your account",
        """    <h2 style="color: #2c3e50;">New sign-in detected</h2>
    <p>We detected a new sign-in to your account on <strong>{{date}}</strong>.
    If this was not you, contact us immediately.</p>""",
    ),
    NotificationType.TRANSACTION_PURCHASE: _page(
        "Purchase made",
        """    <h2 style="color: #2c3e50;">Purchase of ${{amount}}</h2>
    <table>
      <tr><td>Merchant</td><td>{{merchant}}</td></tr>
      <tr><td>Date</td><td>{{date}}</td></tr>
      <tr><td>Card</td><td>****{{cardId}}</td></tr>
    </table>""",
    ),
    NotificationType.CARD_CREATE: _page(
        "New card created",
        """    <h2 style="color: #2c3e50;">New {{type}} card</h2>
    <p>Your new {{type}} card was created on {{date}}.</p>
    <p>Available amount: ${{amount}}</p>""",
    ),
    NotificationType.TRANSACTION_SAVE: _page(
        "Deposit made",
        """    <h2 style="color: #2c3e50;">+${{amount}}</h2>
    <p>Your deposit was received on {{date}}.</p>""",
    ),
    NotificationType.REPORT_ACTIVITY: _page(
        "Activity report",
        """    <h2 style="color: #2c3e50;">Your activity report is ready</h2>
    <p><a href="{{url}}">Download your report</a></p>
    <p>Generated on {{date}}</p>""",
    ),
}

GENERIC_TEMPLATE = _page(
    GENERIC_SUBJECT,
    """    <h2 style="color: #2c3e50;">Notification</h2>
    <p>You have a new notification from Inferno Bank.</p>""",
)


def generate_subject(kind: Any, payload: Optional[Mapping[str, Any]] = None) -> str:
    """Subject line for a kind; unknown kinds get the generic subject."""
    subject_for = SUBJECTS.get(NotificationType.parse(kind))
    if subject_for is None:
        return GENERIC_SUBJECT
    return subject_for(payload or {})


def get_template_file_name(kind: Any) -> str:
    return TEMPLATE_MAPPING.get(NotificationType.parse(kind), GENERIC_TEMPLATE_NAME)


def get_default_template(kind: Any) -> str:
    return DEFAULT_TEMPLATES.get(NotificationType.parse(kind), GENERIC_TEMPLATE)


def _timezone(name: str):
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        return pytz.utc


def format_display_date(moment: datetime, timezone_name: str) -> str:
    if moment.tzinfo is None:
        moment = pytz.utc.localize(moment)
    return moment.astimezone(_timezone(timezone_name)).strftime(DISPLAY_DATE_FORMAT)


def format_template_data(
    data: Mapping[str, Any], timezone_name: str = "UTC"
) -> Dict[str, Any]:
    """Prepare payload values for display.

    ``date`` (ISO 8601) becomes a readable local date, a numeric ``amount``
    gets thousands separators and two decimals, ``cardId`` keeps its last
    four characters. Values that cannot be formatted are kept as given.
    """
    formatted = dict(data)

    date_value = formatted.get("date")
    if isinstance(date_value, str) and date_value:
        try:
            parsed = datetime.fromisoformat(date_value.replace("Z", "+00:00"))
            formatted["date"] = format_display_date(parsed, timezone_name)
        except ValueError:
            pass

    amount = formatted.get("amount")
    if isinstance(amount, (int, float, Decimal)) and not isinstance(amount, bool):
        formatted["amount"] = f"{amount:,.2f}"

    card_id = formatted.get("cardId")
    if card_id:
        formatted["cardId"] = str(card_id)[-4:]

    return formatted


def render_template(template: str, values: Mapping[str, Any]) -> str:
    """Substitute ``{{name}}`` placeholders whose name is a key of ``values``.

    Unmatched placeholders are left verbatim. Values are HTML-escaped text;
    nothing in the template is evaluated.
    """

    def substitute(match: "re.Match[str]") -> str:
        name = match.group(1)
        if name not in values:
            return match.group(0)
        value = values[name]
        return "" if value is None else html.escape(str(value))

    return PLACEHOLDER_PATTERN.sub(substitute, template)
