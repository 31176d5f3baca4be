"""
User-Agent Classification

Lightweight device detection from the User-Agent header. The result is
stored with the click attribution and decides nothing about the redirect
itself.
"""

import re
from typing import Optional

from tg_redirect.core.types import DeviceInfo

MOBILE_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"android.*mobile",
        r"iphone",
        r"ipod",
        r"blackberry",
        r"windows phone",
        r"webos",
        r"opera mini",
        r"mobile safari",
    )
]

TABLET_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"ipad",
        r"android(?!.*mobile)",
        r"tablet",
        r"kindle",
        r"silk",
        r"playbook",
    )
]

# First match wins, so more specific names come first
OS_PATTERNS = [
    (re.compile(r"iphone|ipad|ipod", re.IGNORECASE), "iOS"),
    (re.compile(r"android", re.IGNORECASE), "Android"),
    (re.compile(r"windows phone", re.IGNORECASE), "Windows Phone"),
    (re.compile(r"windows", re.IGNORECASE), "Windows"),
    (re.compile(r"mac os x|macos", re.IGNORECASE), "macOS"),
    (re.compile(r"cros|chrome os", re.IGNORECASE), "Chrome OS"),
    (re.compile(r"linux", re.IGNORECASE), "Linux"),
]

BROWSER_PATTERNS = [
    (re.compile(r"telegram", re.IGNORECASE), "Telegram"),
    (re.compile(r"linkedinapp|linkedin", re.IGNORECASE), "LinkedIn"),
    (re.compile(r"edg(e|a|ios)?/", re.IGNORECASE), "Edge"),
    (re.compile(r"opr/|opera", re.IGNORECASE), "Opera"),
    (re.compile(r"chrome|crios", re.IGNORECASE), "Chrome"),
    (re.compile(r"firefox|fxios", re.IGNORECASE), "Firefox"),
    (re.compile(r"safari", re.IGNORECASE), "Safari"),
    (re.compile(r"msie|trident", re.IGNORECASE), "IE"),
]

BOT_PATTERN = re.compile(
    r"bot|crawler|spider|scraper|curl|wget|python|java|php|facebook|externalhit|slurp|yahoo",
    re.IGNORECASE,
)


def _first_match(patterns, user_agent: str) -> str:
    for pattern, name in patterns:
        if pattern.search(user_agent):
            return name
    return "Unknown"


def parse_user_agent(user_agent: Optional[str]) -> DeviceInfo:
    """
    Classify a User-Agent string.

    Returns:
        DeviceInfo with type, OS, browser and whether the Telegram app is
        likely installed (Telegram's own browser, iOS/Android phones, tablets)
    """
    if not user_agent:
        return DeviceInfo()

    device_type = "desktop"
    if any(p.search(user_agent) for p in MOBILE_PATTERNS):
        device_type = "mobile"
    elif any(p.search(user_agent) for p in TABLET_PATTERNS):
        device_type = "tablet"

    os_name = _first_match(OS_PATTERNS, user_agent)
    browser = _first_match(BROWSER_PATTERNS, user_agent)

    has_telegram_app = (
        browser == "Telegram"
        or (device_type == "mobile" and os_name in ("iOS", "Android"))
        or device_type == "tablet"
    )

    return DeviceInfo(
        type=device_type,
        os=os_name,
        browser=browser,
        has_telegram_app=has_telegram_app,
    )


def is_bot(user_agent: Optional[str]) -> bool:
    """Return True if the user agent looks like a crawler or link previewer."""
    if not user_agent:
        return True
    return BOT_PATTERN.search(user_agent) is not None
