"""Automatic detection of the hand-history dialect from header signatures."""
import logging
from typing import List, Tuple

from ..errors import ErrorCode, ParseError
from .dialects import DIALECTS, UNSUPPORTED_SIGNATURES, Dialect

logger = logging.getLogger(__name__)


def count_headers(text: str) -> List[Tuple[Dialect, int]]:
    """Number of hand headers of each supported dialect found in the text."""
    counts = []
    for dialect in DIALECTS:
        n = len(dialect.signature.findall(text))
        if n:
            counts.append((dialect, n))
    return counts


def detect_dialect(text: str) -> Dialect:
    """
    Detect which dialect a single hand is written in.

    Raises:
        ParseError: Empty input, more than one hand, a recognised but
            unsupported vendor, or an unknown format
    """
    if not text or not text.strip():
        raise ParseError("Hand history is empty", code=ErrorCode.PARSE_EMPTY_INPUT)

    text = "\n".join(line.strip() for line in text.splitlines())
    counts = count_headers(text)
    total = sum(n for _, n in counts)

    if total > 1:
        sites = ", ".join(f"{d.label} x{n}" for d, n in counts)
        raise ParseError(
            f"Input contains {total} hands ({sites}); paste one hand at a time",
            code=ErrorCode.PARSE_MULTIPLE_HANDS,
            details={'hands': total},
        )

    if total == 1:
        dialect = counts[0][0]
        logger.debug(f"Detected {dialect.label} hand history")
        return dialect

    for vendor, signature in UNSUPPORTED_SIGNATURES:
        if signature.search(text):
            raise ParseError(
                f"{vendor} hand histories are not supported",
                code=ErrorCode.PARSE_UNSUPPORTED_DIALECT,
                details={'dialect': vendor},
            )

    first_line = text.strip().splitlines()[0][:80]
    raise ParseError(
        f"Unrecognized hand history header: '{first_line}'",
        code=ErrorCode.PARSE_UNRECOGNIZED_FORMAT,
        details={'header': first_line},
    )
