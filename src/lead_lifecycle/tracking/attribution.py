"""Acquisition attribution captured from the request context."""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs, urlparse

from ..storage.models import AttributionData

# Query parameters carried by shared content links
CONTENT_PARAM = 'c'
MEMBER_PARAM = 'm'
PLATFORM_PARAM = 'p'


@dataclass
class RequestContext:
    """Page context a tracking call originated from."""

    url: str = ""
    referrer: str = ""


def _first_param(params: dict, name: str) -> Optional[str]:
    values = params.get(name)
    if values and values[0]:
        return values[0]
    return None


def extract_attribution(context: Optional[RequestContext]) -> AttributionData:
    """Read content/member/platform identifiers from the page URL."""
    if context is None:
        return AttributionData()

    params = parse_qs(urlparse(context.url).query) if context.url else {}
    return AttributionData(
        content_id=_first_param(params, CONTENT_PARAM),
        member_id=_first_param(params, MEMBER_PARAM),
        platform=_first_param(params, PLATFORM_PARAM),
        referrer=context.referrer or None,
    )


def source_from_context(context: Optional[RequestContext]) -> str:
    """Profile source: the referrer when there is one, otherwise 'direct'."""
    if context is None or not context.referrer:
        return 'direct'
    return context.referrer


def page_url(context: Optional[RequestContext]) -> str:
    return context.url if context else ""
