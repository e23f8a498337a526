from __future__ import annotations

import html

STATUS_BADGES = {
    "active": ("default", "ACTIVE"),
    "dev": ("secondary", "DEV"),
    "filed": ("outline", "FILED"),
    "offline": ("destructive", "OFFLINE"),
}


def get_status(status: object) -> dict:
    """Map a project status to its badge variant and label.

    Anything outside ``STATUS_BADGES`` (including None) gives an empty dict.
    """

    if not isinstance(status, str) or status not in STATUS_BADGES:
        return {}
    variant, text = STATUS_BADGES[status]
    return {"variant": variant, "text": text}


def build_status_badge(status: object) -> str:
    badge = get_status(status)
    if not badge:
        return ""
    return f'<span class="badge badge-{badge["variant"]}">{html.escape(badge["text"])}</span>'
