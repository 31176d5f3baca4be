"""
Telegram Link Building and Shim Page

Builds the Telegram URLs for each destination type and renders the
intermediate "shim" page that tries the tg:// deep link before falling
back to https://t.me.

Destination types:
- bot: https://t.me/{bot}?start={param}
- public: https://t.me/{username}
- invite: https://t.me/+{hash}
"""

from pathlib import Path
from typing import Optional
from urllib.parse import quote

from jinja2 import Environment, FileSystemLoader, select_autoescape

from tg_redirect.core.types import DestinationType

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
DEFAULT_FALLBACK_DELAY_MS = 1500
REF_TAG_LENGTH = 12

_env = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(["html"]),
)


def _q(value: str) -> str:
    return quote(value, safe="")


def build_deep_link(destination_type: DestinationType, destination: str, start_param: Optional[str] = None) -> str:
    """Build the tg:// deep link for a destination."""
    if destination_type == "invite":
        return f"tg://join?invite={_q(destination)}"
    link = f"tg://resolve?domain={_q(destination)}"
    if destination_type == "bot" and start_param:
        link += f"&start={_q(start_param)}"
    return link


def build_fallback_url(destination_type: DestinationType, destination: str, start_param: Optional[str] = None) -> str:
    """Build the https://t.me URL for a destination."""
    if destination_type == "invite":
        return f"https://t.me/+{_q(destination)}"
    url = f"https://t.me/{_q(destination)}"
    if destination_type == "bot" and start_param:
        url += f"?start={_q(start_param)}"
    return url


def build_redirect_url(destination_type: DestinationType, destination: str, start_param: Optional[str] = None) -> str:
    """
    Outbound URL for a click. Pure function of its arguments.

    The start parameter is only used for bot destinations.
    """
    return build_fallback_url(destination_type, destination, start_param)


def render_shim_page(
    destination_type: DestinationType,
    destination: str,
    start_param: Optional[str] = None,
    title: str = "Opening Telegram...",
    description: str = "Tap the button below if Telegram doesn't open automatically.",
    fallback_delay: int = DEFAULT_FALLBACK_DELAY_MS,
) -> str:
    """
    Render the shim HTML page.

    All values are HTML-escaped by the template; URLs passed into the
    inline script are JSON-encoded.
    """
    template = _env.get_template("shim.html")
    return template.render(
        title=title,
        description=description,
        deep_link=build_deep_link(destination_type, destination, start_param),
        fallback_url=build_fallback_url(destination_type, destination, start_param),
        fallback_delay=int(fallback_delay),
        ref_tag=start_param[:REF_TAG_LENGTH] if start_param else None,
    )
