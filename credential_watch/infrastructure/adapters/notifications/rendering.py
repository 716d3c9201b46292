"""Rendering of the expiration report as HTML and plain text."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from html import escape
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ....domain.entities import CredentialSummary, NotificationItem

TITLE = "Entra ID Secrets Expiration Alert"
FOOTER_LINES = (
    "This is an automated notification from the Entra ID credential watcher.",
    "Please take immediate action to renew expired secrets and plan for upcoming expirations.",
)


@dataclass(frozen=True, slots=True)
class RenderedReport:
    """Subject and content-equivalent HTML and text bodies."""

    subject: str
    html: str
    text: str


@dataclass(frozen=True, slots=True)
class _CredentialLine:
    status: str
    css_class: str
    type_label: str
    name: str
    expiration: str


def status_label(credential: CredentialSummary) -> str:
    """Status shown for a credential, e.g. ``EXPIRED`` or ``Expires in 3 days``."""
    if credential.is_expired:
        return "EXPIRED"
    days = credential.days_until_expiration
    return f"Expires in {days} day{'' if days == 1 else 's'}"


def format_expiration(moment: datetime) -> str:
    """Format an expiration instant in UTC."""
    aware = moment if moment.tzinfo else moment.replace(tzinfo=UTC)
    return aware.astimezone(UTC).strftime("%Y-%m-%d %H:%M UTC")


def format_subject(application_count: int) -> str:
    """Subject line embedding the number of flagged applications."""
    return f"{TITLE} - {application_count} application(s) require attention"


def _lines(item: NotificationItem) -> list[_CredentialLine]:
    return [
        _CredentialLine(
            status=status_label(cred),
            css_class="expired" if cred.is_expired else "warning",
            type_label=str(cred.credential_type).upper(),
            name=cred.display_name or "Unnamed",
            expiration=format_expiration(cred.end_date_time),
        )
        for cred in item.credentials
    ]


def render_report(items: list[NotificationItem], generated_at: datetime) -> RenderedReport:
    """
    Render the report for the flagged applications.

    Both bodies list the same applications in the same order with the same
    per-credential fields.

    Args:
        items: Flagged applications, in report order.
        generated_at: Timestamp printed in the report header.

    Returns:
        RenderedReport with subject, HTML and plain-text bodies.
    """
    total = len(items)
    expired = sum(1 for item in items if item.has_expired)
    generated = format_expiration(generated_at)

    return RenderedReport(
        subject=format_subject(total),
        html=_render_html(items, generated, total, expired),
        text=_render_text(items, generated, total, expired),
    )


def _render_text(items: list[NotificationItem], generated: str, total: int, expired: int) -> str:
    lines = [
        TITLE.upper(),
        f"Generated on: {generated}",
        "",
        "SUMMARY",
        f"- Total Applications: {total}",
        f"- Applications with Expired Secrets: {expired}",
        f"- Applications with Expiring Soon: {total - expired}",
        "",
    ]

    for item in items:
        lines.append(f"APPLICATION: {item.app_name}")
        lines.append(f"App ID: {item.app_id}")
        for line in _lines(item):
            lines.extend([
                f"  - {line.status}",
                f"    Type: {line.type_label}",
                f"    Name: {line.name}",
                f"    Expiration: {line.expiration}",
            ])
        lines.append("")

    lines.extend(["", *FOOTER_LINES])
    return "\n".join(lines) + "\n"


def _render_html(items: list[NotificationItem], generated: str, total: int, expired: int) -> str:
    blocks = ""
    for item in items:
        entries = ""
        for line in _lines(item):
            entries += f"""
<div class="secret-item {line.css_class}">
<strong>{escape(line.status)}</strong><br>
Type: {escape(line.type_label)}<br>
Name: {escape(line.name)}<br>
Expiration: {escape(line.expiration)}
</div>"""
        blocks += f"""
<div class="app-block">
<div class="app-title">{escape(item.app_name)}</div>
<p><strong>App ID:</strong> {escape(item.app_id)}</p>{entries}
</div>"""

    footer = "".join(f"<p>{escape(text)}</p>" for text in FOOTER_LINES)

    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{TITLE}</title>
<style>
body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
.header {{ background-color: #0078d4; color: white; padding: 20px; border-radius: 5px; }}
.summary {{ background-color: #f8f9fa; padding: 15px; margin: 20px 0; border-radius: 5px; }}
.app-block {{ margin: 20px 0; padding: 15px; border: 1px solid #e0e0e0; border-radius: 5px; }}
.app-title {{ font-size: 18px; font-weight: bold; color: #0078d4; margin-bottom: 10px; }}
.secret-item {{ margin: 10px 0; padding: 10px; background-color: #f8f9fa; border-radius: 3px; }}
.expired {{ background-color: #fff5f5; border-left: 4px solid #dc3545; }}
.warning {{ background-color: #fff8e1; border-left: 4px solid #ffc107; }}
.footer {{ margin-top: 30px; padding: 15px; background-color: #f8f9fa; border-radius: 5px; font-size: 12px; color: #666; }}
</style>
</head>
<body>
<div class="header">
<h1>{TITLE}</h1>
<p>Generated on: {generated}</p>
</div>
<div class="summary">
<h2>Summary</h2>
<ul>
<li><strong>Total Applications:</strong> {total}</li>
<li><strong>Applications with Expired Secrets:</strong> {expired}</li>
<li><strong>Applications with Expiring Soon:</strong> {total - expired}</li>
</ul>
</div>
{blocks}
<div class="footer">{footer}</div>
</body>
</html>"""
