"""
Text processing for the calendar knowledge base: cleaning and recursive chunking.

Calendar text is line-oriented (date, zone, waste types), so chunks are cut on
paragraph breaks first, then lines, then sentences, then words.
"""

import re
import unicodedata

DEFAULT_SEPARATORS: tuple[str, ...] = ("\n\n", "\n", ". ", " ")

_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def clean_text(text: str) -> str:
    """
    Normalize raw knowledge text: NFKC, strip control characters and per-line
    whitespace, collapse runs of blank lines into one. Repeated lines are kept.
    """
    if not text or not text.strip():
        return ""
    text = unicodedata.normalize("NFKC", text)
    text = _CONTROL_CHARS_RE.sub(" ", text)
    result: list[str] = []
    for line in (ln.strip() for ln in text.splitlines()):
        if line == "" and (not result or result[-1] == ""):
            continue
        result.append(line)
    return "\n".join(result).strip()


def _hard_split(text: str, chunk_size: int, overlap: int) -> list[str]:
    step = max(1, chunk_size - overlap)
    return [text[i : i + chunk_size] for i in range(0, len(text), step) if text[i : i + chunk_size].strip()]


def _overlap_tail(pieces: list[str], sep: str, overlap: int) -> list[str]:
    tail: list[str] = []
    for piece in reversed(pieces):
        if len(sep.join([piece] + tail)) > overlap:
            break
        tail.insert(0, piece)
    return tail


def _split_recursive(text: str, chunk_size: int, overlap: int, separators: tuple[str, ...]) -> list[str]:
    if len(text) <= chunk_size:
        return [text]
    for i, sep in enumerate(separators):
        if sep in text:
            pieces = text.split(sep)
            rest = separators[i + 1 :]
            break
    else:
        return _hard_split(text, chunk_size, overlap)

    chunks: list[str] = []
    current: list[str] = []
    for piece in pieces:
        if not piece.strip():
            continue
        if len(piece) > chunk_size:
            if current:
                chunks.append(sep.join(current))
                current = []
            chunks.extend(_split_recursive(piece, chunk_size, overlap, rest))
            continue
        if current and len(sep.join(current + [piece])) > chunk_size:
            chunks.append(sep.join(current))
            current = _overlap_tail(current, sep, overlap)
            if current and len(sep.join(current + [piece])) > chunk_size:
                current = []
        current.append(piece)
    if current:
        chunks.append(sep.join(current))
    return chunks


def chunk_text(
    text: str,
    chunk_size: int = 512,
    overlap: int = 50,
    separators: tuple[str, ...] = DEFAULT_SEPARATORS,
) -> list[str]:
    """
    Split text into chunks of at most chunk_size characters.

    Pieces are merged greedily; when a chunk is closed, its trailing pieces that
    fit within `overlap` characters start the next chunk.
    """
    if not text or not text.strip():
        return []
    if overlap >= chunk_size:
        raise ValueError("overlap must be smaller than chunk_size")
    chunks = _split_recursive(text.strip(), chunk_size, overlap, separators)
    return [c.strip() for c in chunks if c.strip()]
