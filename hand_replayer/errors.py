"""
Error taxonomy and the discriminated result returned at the pipeline boundary.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, Tuple, TypeVar, Union

T = TypeVar('T')


class ErrorCode(str, Enum):
    """Typed failure codes, grouped by stage"""

    # Parse
    PARSE_EMPTY_INPUT = "PARSE_EMPTY_INPUT"
    PARSE_INPUT_TOO_LARGE = "PARSE_INPUT_TOO_LARGE"
    PARSE_UNRECOGNIZED_FORMAT = "PARSE_UNRECOGNIZED_FORMAT"
    PARSE_UNSUPPORTED_DIALECT = "PARSE_UNSUPPORTED_DIALECT"
    PARSE_MULTIPLE_HANDS = "PARSE_MULTIPLE_HANDS"
    PARSE_MALFORMED_HEADER = "PARSE_MALFORMED_HEADER"
    PARSE_MALFORMED_TABLE = "PARSE_MALFORMED_TABLE"
    PARSE_MALFORMED_SEAT = "PARSE_MALFORMED_SEAT"
    PARSE_INVALID_AMOUNT = "PARSE_INVALID_AMOUNT"
    PARSE_INVALID_CARD = "PARSE_INVALID_CARD"
    PARSE_DUPLICATE_PLAYER = "PARSE_DUPLICATE_PLAYER"
    PARSE_UNKNOWN_PLAYER = "PARSE_UNKNOWN_PLAYER"

    # Validation
    VAL_CRITICAL = "VAL_CRITICAL"

    # Side pot maths
    MATH_INVALID_CONTRIBUTION = "MATH_INVALID_CONTRIBUTION"
    MATH_INVALID_STATUS = "MATH_INVALID_STATUS"
    MATH_INVALID_RAKE = "MATH_INVALID_RAKE"
    MATH_POT_MISMATCH = "MATH_POT_MISMATCH"

    # Settlement
    SETTLE_UNRESOLVED_WINNER = "SETTLE_UNRESOLVED_WINNER"
    SETTLE_EMPTY_ELIGIBLE = "SETTLE_EMPTY_ELIGIBLE"

    # Guards / snapshots
    GUARD_VIOLATION = "GUARD_VIOLATION"
    SNAP_LIMIT_EXCEEDED = "SNAP_LIMIT_EXCEEDED"
    SNAP_INVALID_ACTION = "SNAP_INVALID_ACTION"

    SYS_INTERNAL = "SYS_INTERNAL"


class Severity(str, Enum):
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ReplayerError(Exception):
    """Base class for every typed failure raised inside the pipeline."""

    default_code = ErrorCode.SYS_INTERNAL

    def __init__(self, message: str, code: ErrorCode = None,
                 details: Dict[str, Any] = None,
                 severity: Severity = Severity.CRITICAL,
                 recoverable: bool = False):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        self.severity = severity
        self.recoverable = recoverable

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"


class ParseError(ReplayerError):
    """Raised when hand-history text cannot be turned into a HandHistory"""
    default_code = ErrorCode.PARSE_UNRECOGNIZED_FORMAT


class HandValidationError(ReplayerError):
    """Raised when a parsed hand has critical validation issues"""
    default_code = ErrorCode.VAL_CRITICAL


class SidePotError(ReplayerError):
    """Raised for invalid side-pot input or a conservation mismatch"""
    default_code = ErrorCode.MATH_POT_MISMATCH


class SettlementError(ReplayerError):
    """Raised when a pot cannot be paid under the fail-fast policy"""
    default_code = ErrorCode.SETTLE_UNRESOLVED_WINNER


class GuardViolation(ReplayerError):
    """Raised when a critical mathematical guard fails"""
    default_code = ErrorCode.GUARD_VIOLATION


class SnapshotBuildError(ReplayerError):
    """Raised when the action log cannot be replayed"""
    default_code = ErrorCode.SNAP_INVALID_ACTION


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T
    warnings: Tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    code: ErrorCode
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return False

    @classmethod
    def from_error(cls, error: ReplayerError) -> 'Failure':
        return cls(code=error.code, message=error.message, details=dict(error.details))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'code': self.code.value,
            'message': self.message,
            'details': self.details,
        }


Result = Union[Success, Failure]
