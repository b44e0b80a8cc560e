"""Links for sharing a quote: share page, generated image, and social networks."""

import re
from enum import StrEnum
from urllib.parse import quote, urlencode

from quotekeeper.stores.records import QuoteRecord

PLACEHOLDER_IMAGE_BASE = "https://placehold.co/1200x630/7c3aed/ffffff"
FALLBACK_TEXT_LIMIT = 50


class ImageTheme(StrEnum):
    LIGHT = "light"
    DARK = "dark"
    BLUE = "blue"
    GREEN = "green"


class ImageSize(StrEnum):
    DEFAULT = "default"
    MOBILE = "mobile"
    SQUARE = "square"


def quote_image_url(
    base_url: str,
    record: QuoteRecord,
    theme: ImageTheme = ImageTheme.LIGHT,
    size: ImageSize = ImageSize.DEFAULT,
) -> str:
    """URL of the rendered share image for a quote."""
    params = []
    if record.text:
        params.append(("text", record.text))
    if record.author:
        params.append(("author", record.author))
    if record.category:
        params.append(("category", record.category))
    params.append(("theme", ImageTheme(theme).value))
    params.append(("size", ImageSize(size).value))
    return f"{base_url.rstrip('/')}/api/og?{urlencode(params)}"


def quote_share_url(base_url: str, quote_id: str) -> str:
    """URL of the public share page for a quote."""
    return f"{base_url.rstrip('/')}/share?{urlencode({'id': quote_id})}"


def _sanitize(value: str) -> str:
    return re.sub(r"[^\w\s.,!?-]", "", value)


def fallback_image_url(record: QuoteRecord) -> str:
    """Placeholder image URL used when the rendered image is unavailable."""
    text = record.text
    if len(text) > FALLBACK_TEXT_LIMIT:
        text = text[:FALLBACK_TEXT_LIMIT] + "..."
    caption = f'"{_sanitize(text)}" — {_sanitize(record.author)}'
    return f"{PLACEHOLDER_IMAGE_BASE}?text={quote(caption, safe='')}"


def share_text(record: QuoteRecord) -> str:
    return f'"{record.text}" — {record.author}'


def social_links(record: QuoteRecord, share_url: str) -> dict[str, str]:
    """Share URLs for Facebook, Twitter and WhatsApp, plus an Instagram caption."""
    text = share_text(record)
    encoded_url = quote(share_url, safe="")
    encoded_text = quote(text, safe="")
    return {
        "facebook_url": f"https://www.facebook.com/sharer/sharer.php?u={encoded_url}",
        "twitter_url": f"https://twitter.com/intent/tweet?text={encoded_text}&url={encoded_url}",
        "whatsapp_url": f"https://wa.me/?text={encoded_text}%20{encoded_url}",
        "instagram_caption": f"{text}\n\n{share_url}",
    }
