"""
Share URL transport.

Wraps the compressed trade payload as the ``trade`` query parameter and
unwraps it again. Page state (current URL, history replace, clock) comes in
through an explicit UrlContext instead of ambient globals.

FAILURE POLICY:
    Nothing in this module raises to its caller. Encoding failures return
    None (or a diagnostic with an ``error`` field), decoding failures
    return None.
"""

import json
import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from urllib.parse import parse_qsl, quote, unquote, unquote_plus, urlsplit, urlunsplit

from riftrades.codec.compression import DecodeFailure, compress, decompress
from riftrades.codec.serializer import deserialize, serialize, to_json
from riftrades.config import LARGE_TRADE_THRESHOLD, MAX_URL_LENGTH, settings
from riftrades.models.card import TradeCard
from riftrades.models.trade import DecodedTrade

logger = logging.getLogger(__name__)

TRADE_PARAM = "trade"


@dataclass
class UrlContext:
    """
    The page the codec runs against.

    Attributes:
        current_url: URL currently shown to the user
        clock: Returns the current time in epoch seconds
        on_replace: Called after the URL is replaced in place (history
            replace, never a navigation)
    """

    current_url: str
    clock: Callable[[], float] = time.time
    on_replace: Callable[[str], None] | None = None

    def now(self) -> float:
        return self.clock()

    def update_url(self, url: str) -> None:
        """Replace the visible URL without reloading the page."""
        self.current_url = url
        if self.on_replace is not None:
            self.on_replace(url)


@dataclass(frozen=True)
class UrlSizeEstimate:
    """Size of the share URL a trade would produce."""

    url_length: int
    json_length: int
    is_large: bool
    is_too_large: bool
    error: str | None = None


@dataclass(frozen=True)
class ShareLink:
    """A built share URL and the size flags measured on it."""

    url: str
    size: UrlSizeEstimate


@dataclass(frozen=True)
class RoundTripReport:
    """Outcome of encoding a trade and immediately decoding it again."""

    success: bool
    url_length: int = 0
    original_have: int = 0
    original_want: int = 0
    decoded_have: int = 0
    decoded_want: int = 0
    trade_param_preview: str | None = None
    error: str | None = None


def _now(context: UrlContext | None) -> float:
    return context.now() if context is not None else time.time()


def _strip_query(url: str) -> str:
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def encode_trade_param(
    have: Sequence[TradeCard],
    want: Sequence[TradeCard],
    now: float,
) -> tuple[str, str]:
    """
    Encode a trade as a query parameter value.

    Returns:
        (percent-encoded parameter value, JSON text before compression)

    Raises:
        ValueError, TypeError, AttributeError: If a card cannot be serialized
    """
    json_text = to_json(serialize(have, want, now))
    return quote(compress(json_text), safe=""), json_text


def _with_trade_param(base_url: str, value: str) -> str:
    """Add the trade parameter to the query of a URL, ahead of any fragment."""
    parts = urlsplit(base_url)
    piece = f"{TRADE_PARAM}={value}"
    query = f"{parts.query}&{piece}" if parts.query else piece
    return urlunsplit(parts._replace(query=query))


def _encode_share_url(
    have: Sequence[TradeCard],
    want: Sequence[TradeCard],
    base_url: str | None,
    context: UrlContext | None,
) -> tuple[str, str]:
    value, json_text = encode_trade_param(have, want, _now(context))

    if base_url is None:
        base_url = _strip_query(context.current_url) if context else settings.share_base_url

    return _with_trade_param(base_url, value), json_text


def _measure(url: str, json_text: str) -> UrlSizeEstimate:
    longest = max(len(url), len(json_text))
    return UrlSizeEstimate(
        url_length=len(url),
        json_length=len(json_text),
        is_large=longest > LARGE_TRADE_THRESHOLD,
        is_too_large=longest > MAX_URL_LENGTH,
    )


def build_share_link(
    have: Sequence[TradeCard],
    want: Sequence[TradeCard],
    base_url: str | None = None,
    context: UrlContext | None = None,
) -> ShareLink | None:
    """
    Build a shareable URL for a trade and measure it.

    Args:
        have: Cards offered
        want: Cards requested
        base_url: URL to add the parameter to. Defaults to the context
            URL without its query, then to the configured share base URL.
        context: Page context supplying the clock and current URL

    Returns:
        The link with its size flags, or None if encoding failed
    """
    try:
        url, json_text = _encode_share_url(have, want, base_url, context)
    except Exception as e:
        logger.error("Failed to encode trade to URL: %s", e)
        return None

    if len(json_text) > LARGE_TRADE_THRESHOLD:
        logger.warning("Trade data is large (%d chars), URL may be long", len(json_text))
    if len(url) > MAX_URL_LENGTH:
        logger.warning(
            "Generated URL is very long (%d chars), may not work in all browsers", len(url)
        )

    return ShareLink(url=url, size=_measure(url, json_text))


def build_share_url(
    have: Sequence[TradeCard],
    want: Sequence[TradeCard],
    base_url: str | None = None,
    context: UrlContext | None = None,
) -> str | None:
    """The share URL for a trade, or None if encoding failed."""
    link = build_share_link(have, want, base_url, context)
    return link.url if link is not None else None


def get_trade_param(url: str) -> str | None:
    """First value of the trade parameter in a URL, form-decoded once."""
    for key, value in parse_qsl(urlsplit(url).query, keep_blank_values=True):
        if key == TRADE_PARAM:
            return value
    return None


def decode_trade_param(value: str | None, now: float) -> DecodedTrade | None:
    """
    Decode a trade parameter value.

    Tolerates values that are still percent-encoded, already decoded, or
    had ``+`` turned into spaces by form decoding.

    Returns:
        DecodedTrade, or None on malformed data or an unsupported version
    """
    if not value:
        return None

    candidate = value
    if " " in candidate and not candidate.lstrip().startswith(("{", "[")):
        candidate = candidate.replace(" ", "+")

    if "%" in candidate:
        try:
            candidate = unquote(candidate, errors="strict")
        except UnicodeDecodeError as e:
            logger.warning("Second percent-decode failed, using value as is: %s", e)

    result = decompress(candidate)
    if isinstance(result, DecodeFailure):
        return None

    try:
        return deserialize(json.loads(result.text), now)
    except (ValueError, TypeError, OverflowError, RecursionError) as e:
        logger.error("Failed to read trade payload: %s", e)
        return None


def read_trade_from_url(context: UrlContext) -> DecodedTrade | None:
    """Decode the trade carried by the context URL, if any."""
    try:
        return decode_trade_param(get_trade_param(context.current_url), context.now())
    except Exception as e:
        logger.error("Failed to decode trade from URL: %s", e)
        return None


def has_trade_parameter(context: UrlContext) -> bool:
    """True if the context URL carries a trade parameter (even an empty one)."""
    return get_trade_param(context.current_url) is not None


def _param_name(piece: str) -> str:
    return unquote_plus(piece.split("=", 1)[0])


def clear_trade_parameter(context: UrlContext) -> bool:
    """
    Remove the trade parameter from the visible URL in place.

    Every other query piece is kept byte for byte, along with the path and
    fragment.

    Returns:
        True if a trade parameter was removed
    """
    parts = urlsplit(context.current_url)
    if not parts.query:
        return False

    pieces = parts.query.split("&")
    kept = [piece for piece in pieces if _param_name(piece) != TRADE_PARAM]
    if len(kept) == len(pieces):
        return False

    context.update_url(urlunsplit(parts._replace(query="&".join(kept))))
    return True


def estimate_share_url_size(
    have: Sequence[TradeCard],
    want: Sequence[TradeCard],
    context: UrlContext | None = None,
    base_url: str | None = None,
) -> UrlSizeEstimate:
    """Report how long the share URL for a trade would be."""
    try:
        url, json_text = _encode_share_url(have, want, base_url, context)
    except Exception as e:
        logger.error("Failed to estimate trade URL size: %s", e)
        return UrlSizeEstimate(
            url_length=0,
            json_length=0,
            is_large=False,
            is_too_large=True,
            error=str(e),
        )

    return _measure(url, json_text)


def self_test_round_trip(
    have: Sequence[TradeCard],
    want: Sequence[TradeCard],
    context: UrlContext | None = None,
) -> RoundTripReport:
    """
    Encode a trade and decode it straight back.

    Used to pre-flight a share action. The context URL is not modified.
    """
    try:
        url, _ = _encode_share_url(have, want, None, context)
    except Exception as e:
        logger.error("Round-trip test failed to encode: %s", e)
        return RoundTripReport(success=False, error=f"Failed to encode URL: {e}")

    value = get_trade_param(url)
    decoded = decode_trade_param(value, _now(context))
    report = RoundTripReport(
        success=False,
        url_length=len(url),
        original_have=len(have),
        original_want=len(want),
        trade_param_preview=value[:50] if value else None,
    )

    if decoded is None:
        return replace(report, error="Failed to decode URL")

    success = len(decoded.have) == len(have) and len(decoded.want) == len(want)
    return replace(
        report,
        success=success,
        decoded_have=len(decoded.have),
        decoded_want=len(decoded.want),
        error=None if success else "Decoded list lengths do not match",
    )

