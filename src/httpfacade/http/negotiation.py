"""
=============================================================================
CONTENT NEGOTIATION
=============================================================================

Two questions asked of a request:

    accepts("json", "html")   Which of MY types does the client want most?
                              (reads the Accept header)

    is_("json")               Is the body the client SENT of this type?
                              (reads the Content-Type header)

Both expand short names through mime_types.lookup().

=============================================================================
ACCEPT HEADER ANATOMY
=============================================================================

    Accept: text/html, application/*;q=0.8, */*;q=0.1
            ────┬────  ───────┬────────────  ────┬─────
                │             │                  │
         specificity 2   specificity 1     specificity 0
         quality 1.0     quality 0.8       quality 0.1

    For each server candidate, the MOST SPECIFIC matching pattern decides
    its quality. The winner is the candidate with the highest quality;
    ties go to the more specific match, then to the caller's order.

    Candidate "application/json" above → governed by application/* → 0.8
    Candidate "text/html"               → governed by text/html     → 1.0

    q=0 means "not acceptable": a candidate governed by a q=0 pattern is
    refused even if a broader pattern would accept it.

=============================================================================
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence
import logging

from .mime_types import base_type, lookup

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AcceptEntry:
    """One comma-separated element of an Accept-style header."""

    value: str          # "text/html", "text/*", "gzip", "en-us", ...
    quality: float
    specificity: int    # 0 = full wildcard, 1 = partial, 2 = exact
    index: int          # position in the header


def _parse_quality(params: Iterable[str]) -> Optional[float]:
    quality = 1.0
    for param in params:
        key, _, raw = param.partition("=")
        if key.strip().lower() != "q":
            continue
        try:
            quality = float(raw.strip())
        except ValueError:
            return None
        if not 0.0 <= quality <= 1.0:
            return None
    return quality


def parse_accept(header: Optional[str]) -> List[AcceptEntry]:
    """
    Parse an Accept header into entries, in header order.

    Malformed elements (no "/", bad q value, "*/subtype") are skipped.
    Entries with q=0 are kept; they veto matches, see best_media_type().
    """
    entries: List[AcceptEntry] = []
    if not header:
        return entries

    for index, element in enumerate(header.split(",")):
        parts = element.split(";")
        media_type = parts[0].strip().lower()
        if not media_type:
            continue
        if media_type == "*":
            media_type = "*/*"

        main, sep, sub = media_type.partition("/")
        if not sep or not main or not sub or (main == "*" and sub != "*"):
            logger.debug("Skipping malformed Accept element: %r", element)
            continue

        quality = _parse_quality(parts[1:])
        if quality is None:
            logger.debug("Skipping Accept element with bad q: %r", element)
            continue

        if main == "*":
            specificity = 0
        elif sub == "*":
            specificity = 1
        else:
            specificity = 2

        entries.append(AcceptEntry(media_type, quality, specificity, index))

    return entries


def parse_token_list(header: Optional[str]) -> List[AcceptEntry]:
    """
    Parse Accept-Encoding / Accept-Charset / Accept-Language.

        "gzip, br;q=0.9, *;q=0.1" → gzip(1.0), br(0.9), *(0.1)
    """
    entries: List[AcceptEntry] = []
    if not header:
        return entries

    for index, element in enumerate(header.split(",")):
        parts = element.split(";")
        token = parts[0].strip().lower()
        if not token:
            continue

        quality = _parse_quality(parts[1:])
        if quality is None:
            logger.debug("Skipping token with bad q: %r", element)
            continue

        specificity = 0 if token == "*" else 2
        entries.append(AcceptEntry(token, quality, specificity, index))

    return entries


def _preference_order(entries: Iterable[AcceptEntry]) -> List[str]:
    ranked = sorted(
        (entry for entry in entries if entry.quality > 0),
        key=lambda entry: (-entry.quality, -entry.specificity, entry.index),
    )
    return [entry.value for entry in ranked]


def preferred_media_types(header: Optional[str]) -> List[str]:
    """
    Accepted media types, most preferred first.

    An absent or blank header accepts everything: ["*/*"].
    """
    if not header or not header.strip():
        return ["*/*"]
    return _preference_order(parse_accept(header))


def preferred_tokens(header: Optional[str]) -> List[str]:
    """Accepted tokens, most preferred first ("*" when header is absent)."""
    if not header or not header.strip():
        return ["*"]
    return _preference_order(parse_token_list(header))


def _halves_match(pattern: str, value: str) -> bool:
    return pattern == "*" or value == "*" or pattern == value


def _media_match(pattern: str, media_type: str) -> bool:
    pattern_main, _, pattern_sub = pattern.partition("/")
    main, _, sub = media_type.partition("/")
    return _halves_match(pattern_main, main) and _halves_match(pattern_sub, sub)


def _governing(entries: Sequence[AcceptEntry], matches) -> Optional[AcceptEntry]:
    best = None
    for entry in entries:
        if not matches(entry):
            continue
        if best is None or entry.specificity > best.specificity:
            best = entry
    return best


def _pick(entries, candidates, expand, matches) -> Optional[str]:
    winner = None
    winner_key = None

    for position, candidate in enumerate(candidates):
        expanded = expand(candidate)
        if expanded is None:
            continue

        entry = _governing(entries, lambda e: matches(e, expanded))
        if entry is None or entry.quality <= 0:
            continue

        key = (entry.quality, entry.specificity, -position)
        if winner_key is None or key > winner_key:
            winner, winner_key = candidate, key

    return winner


def best_media_type(header: Optional[str], candidates: Sequence[str]) -> Optional[str]:
    """
    Pick the candidate the client prefers.

    Args:
        header: Raw Accept header (None when absent).
        candidates: Server-supported types, short names or full types.

    Returns:
        The winning candidate exactly as passed in, or None.
        With no Accept header the first candidate wins.
    """
    if not candidates:
        return None
    if not header or not header.strip():
        return candidates[0]

    return _pick(
        parse_accept(header),
        candidates,
        lookup,
        lambda entry, media_type: _media_match(entry.value, media_type),
    )


def best_token(
    header: Optional[str],
    candidates: Sequence[str],
    prefix_match: bool = False,
) -> Optional[str]:
    """
    Token negotiation for encodings, charsets and languages.

    Args:
        header: Raw Accept-Encoding / Accept-Charset / Accept-Language.
        candidates: Server-supported tokens.
        prefix_match: Let "en" in the header match candidate "en-US".
    """
    if not candidates:
        return None
    if not header or not header.strip():
        return candidates[0]

    entries = parse_token_list(header)
    if prefix_match:
        entries = _with_prefix_specificity(entries)

    def matches(entry: AcceptEntry, token: str) -> bool:
        if entry.value == "*" or entry.value == token:
            return True
        return prefix_match and token.startswith(entry.value + "-")

    return _pick(entries, candidates, lambda token: token.strip().lower(), matches)


def _with_prefix_specificity(entries: List[AcceptEntry]) -> List[AcceptEntry]:
    # A bare primary tag ("en") is less specific than a full tag ("en-us").
    adjusted = []
    for entry in entries:
        if entry.specificity == 2 and "-" not in entry.value:
            entry = AcceptEntry(entry.value, entry.quality, 1, entry.index)
        adjusted.append(entry)
    return adjusted


def type_matches(content_type: Optional[str], types: Iterable[str]) -> bool:
    """
    Check a request Content-Type against a list of types.

    Examples (Content-Type: application/vnd.api+json; charset=utf-8):
        type_matches(ct, ["json"])              → False (exact type differs)
        type_matches(ct, ["+json"])             → True
        type_matches(ct, ["application/*"])     → True
        type_matches(ct, ["*/*+json"])          → True
    """
    actual = base_type(content_type)
    main, sep, sub = actual.partition("/")
    if not sep or not main or not sub:
        return False

    for wanted in types:
        if not wanted:
            continue

        if wanted.startswith("+"):
            if sub.endswith(wanted.lower()):
                return True
            continue

        expanded = lookup(wanted)
        if expanded is None:
            continue

        wanted_main, _, wanted_sub = expanded.partition("/")
        if wanted_main not in ("*", main):
            continue
        if wanted_sub.startswith("*+"):
            if sub.endswith(wanted_sub[1:]):
                return True
        elif wanted_sub in ("*", sub):
            return True

    return False
