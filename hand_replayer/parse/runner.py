"""
Entry points for parsing a single hand history.
Coordinates dialect detection, the parsing engine and validation.
"""

import logging
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from ..errors import ErrorCode, Failure, ParseError, ReplayerError, Result, Success
from .engine import HandParser
from .schemas import HandHistory
from .site_detector import detect_dialect
from .validation import validated

logger = logging.getLogger(__name__)

# Resource bound on a single pasted hand
MAX_INPUT_CHARS = 100_000


def parse_text(text: str) -> HandHistory:
    """
    Parse and validate one hand, raising on failure.

    Raises:
        ParseError: Input cannot be parsed
        HandValidationError: Parsed hand has critical issues
    """
    if text is not None and len(text) > MAX_INPUT_CHARS:
        raise ParseError(
            f"Input of {len(text)} characters exceeds the {MAX_INPUT_CHARS} limit",
            code=ErrorCode.PARSE_INPUT_TOO_LARGE,
            details={'length': len(text), 'limit': MAX_INPUT_CHARS},
        )
    dialect = detect_dialect(text)
    logger.info(f"Using {dialect.label} dialect")
    try:
        hand = HandParser(dialect).parse(text)
    except ValidationError as e:
        raise ParseError(
            f"{dialect.label} hand is structurally invalid: {e.error_count()} field error(s)",
            code=ErrorCode.PARSE_UNRECOGNIZED_FORMAT,
            details={'errors': [err['msg'] for err in e.errors()]},
        ) from e
    return validated(hand)


def parse_hand(text: str) -> Result:
    """
    Parse one hand into a discriminated result.

    Returns:
        Success(HandHistory) or Failure(code, message)
    """
    try:
        hand = parse_text(text)
    except ReplayerError as e:
        logger.info(f"Parse failed: {e}")
        return Failure.from_error(e)
    except Exception as e:
        logger.exception(f"Unexpected error while parsing: {e}")
        return Failure(ErrorCode.SYS_INTERNAL, "Unexpected error while parsing the hand")
    return Success(hand, warnings=hand.warnings)


def parse_file(file_path: Union[str, Path]) -> Result:
    """Parse a file holding exactly one hand."""
    path = Path(file_path)
    text = path.read_text(encoding='utf-8', errors='replace')
    return parse_hand(text)
