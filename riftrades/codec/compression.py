"""
Pattern-substitution compression for share URLs.

Shrinks the minified JSON of a trade record by replacing the most frequent
JSON fragments with single code points, then Base64-encodes the UTF-8 bytes.

SUBSTITUTION TABLE:
    Ordered (pattern, sentinel) pairs. Compression applies them in table
    order; decompression applies them in reverse table order. A sentinel
    must never occur in the text being compressed: trade JSON is ASCII-only,
    and any sentinel found in other input is escaped as a JSON \\uXXXX
    sequence first.

DECODING:
    Decompression is an explicit chain of strategies tried in priority
    order. A strategy succeeds only if its output parses as JSON.
"""

import base64
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

SUBSTITUTIONS: tuple[tuple[str, str], ...] = (
    ('"n":"', "α"),
    ('"p":', "β"),
    ('"q":', "γ"),
    ('{"', "δ"),
    ('"}', "ε"),
    (',"', "ζ"),
    ('":', "η"),
)


def check_substitution_table(table: tuple[tuple[str, str], ...]) -> frozenset[str]:
    """
    Verify a substitution table is safe to use.

    Every sentinel must be a single non-ASCII, non-whitespace, non-surrogate
    code point, used once, and absent from every pattern.

    Returns:
        The set of sentinels

    Raises:
        ValueError: If the table is unsafe
    """
    sentinels: set[str] = set()
    for pattern, sentinel in table:
        if not pattern:
            raise ValueError("Substitution pattern must not be empty")
        if len(sentinel) != 1:
            raise ValueError(f"Sentinel for {pattern!r} must be a single code point")
        if sentinel.isascii() or sentinel.isspace():
            raise ValueError(f"Sentinel {sentinel!r} collides with JSON text")
        if 0xD800 <= ord(sentinel) <= 0xDFFF:
            raise ValueError(f"Sentinel {sentinel!r} is a surrogate code point")
        if sentinel in sentinels:
            raise ValueError(f"Sentinel {sentinel!r} is used more than once")
        sentinels.add(sentinel)

    for pattern, _ in table:
        for sentinel in sentinels:
            if sentinel in pattern:
                raise ValueError(f"Pattern {pattern!r} contains sentinel {sentinel!r}")

    return frozenset(sentinels)


SENTINELS = check_substitution_table(SUBSTITUTIONS)


def minify_json(text: str) -> str:
    """Strip whitespace outside JSON string literals."""
    out: list[str] = []
    in_string = False
    escaped = False
    for ch in text:
        if in_string:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
            out.append(ch)
        elif not ch.isspace():
            out.append(ch)
    return "".join(out)


def escape_sentinels(text: str) -> str:
    """Replace literal sentinels with their JSON unicode escapes."""
    for sentinel in SENTINELS:
        if sentinel in text:
            text = text.replace(sentinel, f"\\u{ord(sentinel):04x}")
    return text


def apply_substitutions(text: str) -> str:
    for pattern, sentinel in SUBSTITUTIONS:
        text = text.replace(pattern, sentinel)
    return text


def reverse_substitutions(text: str) -> str:
    for pattern, sentinel in reversed(SUBSTITUTIONS):
        text = text.replace(sentinel, pattern)
    return text


def b64encode_text(text: str) -> str:
    """UTF-8-safe Base64 of a string."""
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def b64decode_bytes(payload: str) -> bytes:
    """
    Decode Base64, tolerating missing padding and the URL-safe alphabet.

    Raises:
        binascii.Error: If the payload is not Base64
    """
    cleaned = "".join(payload.split()).replace("-", "+").replace("_", "/")
    cleaned += "=" * (-len(cleaned) % 4)
    return base64.b64decode(cleaned, validate=True)


def compress(text: str) -> str:
    """
    Compress JSON text for a URL.

    Never raises: if the substitution pass fails the text is Base64-encoded
    as is, and if even that fails the text is returned unchanged.

    Whitespace outside strings is dropped and literal sentinel characters
    are written as \\uXXXX escapes, so `decompress` returns equivalent JSON
    rather than the same text. For `to_json` output (minified, ASCII only)
    the text comes back unchanged.
    """
    try:
        prepared = escape_sentinels(minify_json(text))
        return b64encode_text(apply_substitutions(prepared))
    except (UnicodeError, ValueError) as e:
        logger.warning("Pattern compression failed, using plain base64: %s", e)

    try:
        return b64encode_text(text)
    except UnicodeError as e:
        logger.error("Plain base64 encoding failed: %s", e)
        return text


# =============================================================================
# DECODE STRATEGY CHAIN
# =============================================================================


@dataclass(frozen=True, slots=True)
class DecodeSuccess:
    """Decompressed JSON text and the strategy that produced it."""

    text: str
    strategy: str

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class DecodeFailure:
    """Every strategy failed; one message per strategy."""

    errors: tuple[str, ...]

    @property
    def ok(self) -> bool:
        return False


DecodeResult = DecodeSuccess | DecodeFailure


@dataclass(frozen=True, slots=True)
class DecodeStrategy:
    name: str
    decode: Callable[[str], str]


def decode_with_patterns(payload: str) -> str:
    """Base64, then UTF-8, then reverse the substitution table."""
    return reverse_substitutions(b64decode_bytes(payload).decode("utf-8"))


def decode_raw_base64(payload: str) -> str:
    """Base64 without pattern reversal, for payloads that were never compressed."""
    raw = b64decode_bytes(payload)
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw.decode("latin-1")


def decode_literal(payload: str) -> str:
    """The payload is already JSON text."""
    return payload.strip()


DECODE_STRATEGIES: tuple[DecodeStrategy, ...] = (
    DecodeStrategy("patterns", decode_with_patterns),
    DecodeStrategy("raw_base64", decode_raw_base64),
    DecodeStrategy("literal", decode_literal),
)


def decompress(payload: str) -> DecodeResult:
    """
    Reverse `compress`, falling back through the strategy chain.

    Returns:
        DecodeSuccess with JSON text, or DecodeFailure listing each error
    """
    errors: list[str] = []

    for position, strategy in enumerate(DECODE_STRATEGIES):
        try:
            text = strategy.decode(payload)
            json.loads(text)
        except (ValueError, RecursionError) as e:
            errors.append(f"{strategy.name}: {e}")
            logger.debug("Decode strategy %s failed: %s", strategy.name, e)
            continue

        if position > 0:
            logger.warning("Trade payload decoded with fallback strategy %s", strategy.name)
        return DecodeSuccess(text=text, strategy=strategy.name)

    logger.error("Complete decompression failed: %s", "; ".join(errors))
    return DecodeFailure(errors=tuple(errors))
