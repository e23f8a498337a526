from __future__ import annotations

import html
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Optional

_SVG_OPEN = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="24" height="24" viewBox="0 0 24 24" '
    'fill="none" stroke="currentColor" stroke-width="2" stroke-linecap="round" '
    'stroke-linejoin="round" aria-hidden="true">'
)

MAIL_ICON = (
    f"{_SVG_OPEN}"
    '<rect width="20" height="16" x="2" y="4" rx="2"/>'
    '<path d="m22 7-8.97 5.7a1.94 1.94 0 0 1-2.06 0L2 7"/>'
    "</svg>"
)
GITHUB_ICON = (
    f"{_SVG_OPEN}"
    '<path d="M15 22v-4a4.8 4.8 0 0 0-1-3.5c3 0 6-2 6-5.5.08-1.25-.27-2.48-1-3.5.28-1.15.28-2.35 '
    "0-3.5 0 0-1 0-3 1.5-2.64-.5-5.36-.5-8 0C6 2 5 2 5 2c-.3 1.15-.3 2.35 0 3.5A5.403 5.403 0 0 "
    '0 4 9c0 3.5 3 5.5 6 5.5-.39.49-.68 1.05-.85 1.65-.17.6-.22 1.23-.15 1.85v4"/>'
    '<path d="M9 18c-4.51 2-5-2-7-2"/>'
    "</svg>"
)
LINKEDIN_ICON = (
    f"{_SVG_OPEN}"
    '<path d="M16 8a6 6 0 0 1 6 6v7h-4v-7a2 2 0 0 0-2-2 2 2 0 0 0-2 2v7h-4v-7a6 6 0 0 1 6-6z"/>'
    '<rect width="4" height="12" x="2" y="9"/>'
    '<circle cx="4" cy="4" r="2"/>'
    "</svg>"
)


class SocialPlatform(str, Enum):
    EMAIL = "email"
    GITHUB = "github"
    LINKEDIN = "linkedin"
    TWITTER = "twitter"
    FACEBOOK = "facebook"
    INSTAGRAM = "instagram"
    YOUTUBE = "youtube"

    @classmethod
    def from_key(cls, key: str) -> Optional["SocialPlatform"]:
        try:
            return cls(key)
        except ValueError:
            return None


def icon_for(platform: SocialPlatform) -> Optional[str]:
    """Inline SVG for ``platform``, or None when no icon exists yet."""
    match platform:
        case SocialPlatform.EMAIL:
            return MAIL_ICON
        case SocialPlatform.GITHUB:
            return GITHUB_ICON
        case SocialPlatform.LINKEDIN:
            return LINKEDIN_ICON
        case (
            SocialPlatform.TWITTER
            | SocialPlatform.FACEBOOK
            | SocialPlatform.INSTAGRAM
            | SocialPlatform.YOUTUBE
        ):
            return None


@dataclass(frozen=True)
class SocialLink:
    key: str
    href: str
    icon: Optional[str] = None


def social_href(key: str, value: str) -> str:
    if key == SocialPlatform.EMAIL.value and not value.startswith("mailto:"):
        return f"mailto:{value}"
    return value


def social_links(socials: Mapping[str, str]) -> list[SocialLink]:
    """One link per populated entry of ``socials``, in mapping order.

    Empty values are skipped. Keys that are not a known platform, or a
    platform without an icon, still produce a link with ``icon`` set to None.
    """

    links = []
    for key, value in socials.items():
        value = str(value or "").strip()
        if not value:
            continue
        platform = SocialPlatform.from_key(key)
        icon = icon_for(platform) if platform is not None else None
        links.append(SocialLink(key=key, href=social_href(key, value), icon=icon))
    return links


def build_social_list(socials: Mapping[str, str], is_footer: bool = False) -> str:
    links = social_links(socials)
    if not links:
        return ""
    classes = ["social-list", "is-footer" if is_footer else "is-page"]
    items = []
    for link in links:
        label = html.escape(link.key)
        body = link.icon or f'<span class="social-text">{label}</span>'
        items.append(
            f'<li class="social-item"><a href="{html.escape(link.href)}" '
            f'aria-label="{label}" title="{label}">{body}</a></li>'
        )
    return f'<ul class="{" ".join(classes)}">{"".join(items)}</ul>'
