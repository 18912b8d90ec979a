"""
Chat message rendering.

Builds the embeds and button rows the service sends to Discord. Colors
encode outcome: green success, red failure, orange partial, grey
informational, amber warning.
"""

from typing import Any, Dict, List

from app.models.audit import AuditLine, AuditLineStatus, AuditReport
from app.models.error import ErrorRecord
from app.models.interaction import MessagePayload
from app.models.retry import RetryClassification, RetrySummary

COLOR_SUCCESS = 0x2ECC71
COLOR_FAILURE = 0xE74C3C
COLOR_PARTIAL = 0xF39C12
COLOR_INFO = 0x95A5A6
COLOR_WARNING = 0xFFA500

# Discord component constants
ACTION_ROW = 1
BUTTON = 2
BUTTON_STYLE_SUCCESS = 3
BUTTON_STYLE_DANGER = 4

RETRY_ALL_ACTION = "retry_all"
REJECT_ALL_ACTION = "reject_all"

SEPARATOR = "─" * 25


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def _bullets(names: List[str]) -> str:
    return "\n".join(f"• `{name}`" for name in names)


def embed_update(description: str, color: int, keep_components: bool = False) -> MessagePayload:
    """A single-embed message; buttons are removed unless ``keep_components``."""
    return MessagePayload(
        embeds=[{"description": description, "color": color}],
        components=None if keep_components else [],
    )


def error_announcement(business_day: str, errors: List[ErrorRecord]) -> MessagePayload:
    """
    Build the alert for one business day of pending errors.

    Args:
        business_day: Day the errors belong to
        errors: Pending records of that day

    Returns:
        Message with the error list and retry/dismiss buttons
    """
    function_names = list(dict.fromkeys(e.function_name for e in errors))

    embed: Dict[str, Any] = {
        "title": f"🚨 Unprocessed errors for {business_day}",
        "color": COLOR_FAILURE,
        "description": (
            f"**{_plural(len(errors), 'error')} in {_plural(len(function_names), 'function')}** "
            f"for business day `{business_day}`:\n\n{_bullets(function_names)}"
        ),
        "footer": {"text": "Use the buttons to retry or dismiss every error for this date."},
    }

    components = [
        {
            "type": ACTION_ROW,
            "components": [
                {
                    "type": BUTTON,
                    "style": BUTTON_STYLE_SUCCESS,
                    "label": f"✅ Retry all {business_day}",
                    "custom_id": f"{RETRY_ALL_ACTION}:{business_day}",
                },
                {
                    "type": BUTTON,
                    "style": BUTTON_STYLE_DANGER,
                    "label": "❌ Dismiss all",
                    "custom_id": f"{REJECT_ALL_ACTION}:{business_day}",
                },
            ],
        }
    ]

    return MessagePayload(embeds=[embed], components=components)


def nothing_to_retry(business_day: str) -> MessagePayload:
    return embed_update(
        f"ℹ️ No pending errors for `{business_day}` (they may have been processed already).",
        COLOR_INFO,
    )


def errors_dismissed(business_day: str) -> MessagePayload:
    return embed_update(
        f"🗑️ **Errors dismissed for `{business_day}`**\n"
        "Every open error record for that date has been deleted.",
        COLOR_INFO,
    )


def dismiss_failed(business_day: str) -> MessagePayload:
    return embed_update(
        f"⚠️ Could not dismiss the errors for `{business_day}`. Try again in a moment.",
        COLOR_WARNING,
        keep_components=True,
    )


def invalid_button() -> MessagePayload:
    return embed_update("⚠️ Invalid button format.", COLOR_WARNING)


def unknown_action() -> MessagePayload:
    return embed_update("⚠️ Unknown action.", COLOR_WARNING)


def unknown_command(name: str) -> MessagePayload:
    return embed_update(f"⚠️ Unknown command `{name or '?'}`.", COLOR_WARNING)


def retry_summary(summary: RetrySummary) -> MessagePayload:
    """
    Render the outcome of a retry batch.

    Args:
        summary: Reconciled outcomes

    Returns:
        Message colored by full success, full failure or partial result
    """
    day = summary.business_day
    succeeded = [o.function_name for o in summary.succeeded]
    failed = [o.function_name for o in summary.failed]
    classification = summary.classification

    if classification == RetryClassification.FULL_SUCCESS:
        description = (
            f"✅ **Backfill complete for `{day}`**\n"
            f"All functions ({len(succeeded)}) ran successfully."
        )
        color = COLOR_SUCCESS
    elif classification == RetryClassification.FULL_FAILURE:
        description = (
            f"❌ **Backfill failed for `{day}`**\n"
            f"No function could be run:\n{_bullets(failed)}"
        )
        color = COLOR_FAILURE
    else:
        description = (
            f"⚠️ **Partial backfill for `{day}`**\n\n"
            f"✅ Succeeded ({len(succeeded)}):\n{_bullets(succeeded)}\n\n"
            f"❌ Failed ({len(failed)}):\n{_bullets(failed)}"
        )
        color = COLOR_PARTIAL

    return embed_update(description, color)


def _audit_line(line: AuditLine) -> str:
    if line.status == AuditLineStatus.UNKNOWN:
        return f"⚠️ `{line.name}`: could not query table"
    if line.status == AuditLineStatus.WITH_ERRORS:
        return (
            f"⚠️ `{line.name}`: {line.record_count:,} records "
            f"({_plural(line.error_count, 'error')})"
        )
    if line.status == AuditLineStatus.FAILED:
        return f"❌ `{line.name}`: failed ({_plural(line.error_count, 'error')})"
    return f"✅ `{line.name}`: {line.record_count:,} records"


def audit_report(report: AuditReport) -> MessagePayload:
    """
    Render the daily audit.

    Args:
        report: Aggregated audit

    Returns:
        Message with one line per tracked table and a totals footer
    """
    header = f"📊 **Audit for `{report.business_day}`**"
    lines = [_audit_line(line) for line in report.lines]

    if not report.configured:
        description = f"{header}\n\nℹ️ No active audit configuration."
        if lines:
            description += "\n\n" + "\n".join(lines)
        color = COLOR_INFO if not lines else COLOR_FAILURE
        return MessagePayload(embeds=[{"description": description, "color": color}])

    footer_parts = [f"📈 **{report.total_records:,}** total records"]
    if report.ok_count:
        footer_parts.append(f"✅ {report.ok_count} OK")
    if report.error_count:
        footer_parts.append(f"❌ {report.error_count} with errors")

    description = (
        f"{header}\n\n" + "\n".join(lines) + f"\n\n{SEPARATOR}\n" + " · ".join(footer_parts)
    )

    if report.error_count == 0:
        color = COLOR_SUCCESS
    elif report.ok_count == 0:
        color = COLOR_FAILURE
    else:
        color = COLOR_PARTIAL

    return MessagePayload(embeds=[{"description": description, "color": color}])
