"""Byte-budget text segmentation - Pure functions.

The radio transport enforces a per-message ceiling in bytes, not characters,
so text is cut on UTF-8 byte counts without ever splitting a code point,
preferring sentence ends and then word boundaries as split points.
"""

import re
import unicodedata


# Budget reduction used when the first character does not fit
MULTIBYTE_MARGIN = 3

# Greedy: group 1 ends at the last terminator that is followed by whitespace
_SENTENCE_END = re.compile(r"^(.*[.?!])\s", re.DOTALL)
_LAST_WHITESPACE = re.compile(r"^(.*)\s", re.DOTALL)
_COMBINING_MARKS = re.compile("[\n\u0300-\u036f]")


def utf8_len(text: str) -> int:
    """Return the UTF-8 encoded length of text in bytes."""
    return len(text.encode("utf-8"))


def normalize_whitespace(text: str) -> str:
    """Collapse runs of whitespace to single spaces and trim."""
    return " ".join(text.split())


def fold_diacritics(text: str) -> str:
    """Strip combining diacritics and newlines ("Počasie" -> "Pocasie").

    Pure function.
    """
    return _COMBINING_MARKS.sub("", unicodedata.normalize("NFD", text).strip())


def byte_safe_prefix(text: str, max_bytes: int) -> str:
    """Return the longest prefix of text that encodes to at most max_bytes.

    An incomplete trailing code point is dropped rather than corrupted.
    """
    if max_bytes <= 0:
        return ""
    return text.encode("utf-8")[:max_bytes].decode("utf-8", errors="ignore")


def find_split_index(candidate: str) -> int:
    """Find the preferred split point within a byte-safe prefix.

    Returns:
        Index just past the last sentence terminator followed by whitespace,
        else the index of the last whitespace, else -1 if there is no
        usable boundary
    """
    match = _SENTENCE_END.match(candidate)
    if match and match.group(1):
        return len(match.group(1))

    match = _LAST_WHITESPACE.match(candidate)
    if match and match.group(1):
        return len(match.group(1))

    return -1


def truncate(text: str, max_bytes: int) -> str:
    """Shorten text to fit max_bytes, cutting only at a sentence or word end.

    Pure function. Unlike segment(), there is no hard-cut fallback: if no
    boundary exists inside the budget the result is an empty string, which
    callers treat as "nothing to send".

    Args:
        text: Text to shorten
        max_bytes: Byte ceiling

    Returns:
        The whole (trimmed) text if it fits, else its first boundary-safe
        chunk, else ""
    """
    text = text.strip()
    if max_bytes <= 0:
        return ""
    if utf8_len(text) <= max_bytes:
        return text

    candidate = byte_safe_prefix(text, max_bytes)
    split_index = find_split_index(candidate)
    if split_index <= 0:
        return ""

    return text[:split_index].strip()


def segment(text: str, max_bytes: int) -> list[str]:
    """Split text into ordered chunks that each fit max_bytes.

    Pure function.

    Whitespace is normalized first. Each chunk is the longest byte-safe
    prefix of the remaining text, shortened to the last sentence end or
    word boundary where one exists, and hard-cut otherwise.

    Args:
        text: Text to split
        max_bytes: Byte ceiling per chunk

    Returns:
        List of chunks (empty for empty text or a non-positive budget)
    """
    remaining = normalize_whitespace(text)
    if max_bytes <= 0 or not remaining:
        return []

    chunks: list[str] = []

    while remaining:
        if utf8_len(remaining) <= max_bytes:
            chunks.append(remaining)
            break

        candidate = byte_safe_prefix(remaining, max_bytes)
        if not candidate:
            candidate = byte_safe_prefix(remaining, max_bytes - MULTIBYTE_MARGIN)
            if not candidate:
                # First character can never fit
                break

        split_index = find_split_index(candidate)
        chunk = remaining[:split_index] if split_index > 0 else candidate

        chunks.append(chunk.strip())
        remaining = remaining[len(chunk):].strip()

    return chunks
