"""Public error and result models for rulegraph.

Every pipeline stage returns a ``Result``: either a value or a non-empty
list of ``NormalizationError``. Nothing in the kernel raises for bad input.
"""

from typing import Any, Dict, Generic, List, Literal, Optional, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict, model_validator

from rulegraph.codes import ErrorType

FormatType = Literal["A", "B", "C", "D"]

T = TypeVar("T")


class ErrorLocation(BaseModel):
    """Where an error was found."""
    format: Optional[FormatType] = None
    rule_id: Optional[str] = None
    parameter: Optional[str] = None
    line: Optional[int] = None  # INVALID_JSON only
    column: Optional[int] = None  # INVALID_JSON only

    model_config = ConfigDict(frozen=True, extra="forbid")


class NormalizationError(BaseModel):
    """A structured normalization or validation error."""
    error_type: ErrorType
    message: str
    location: ErrorLocation = ErrorLocation()
    cycle_path: Optional[List[str]] = None  # CYCLE_DETECTED only

    model_config = ConfigDict(frozen=True, extra="forbid")

    def to_dict(self) -> Dict[str, Any]:
        """Wire form: absent location fields are dropped."""
        data: Dict[str, Any] = {
            "error_type": self.error_type.value,
            "message": self.message,
            "location": self.location.model_dump(exclude_none=True),
        }
        if self.cycle_path is not None:
            data["cycle_path"] = list(self.cycle_path)
        return data


class Result(BaseModel, Generic[T]):
    """Success value or accumulated errors, never both."""
    ok: bool
    value: Optional[T] = None
    errors: List[NormalizationError] = []

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @model_validator(mode="after")
    def _check_shape(self):
        if self.ok and self.errors:
            raise ValueError("successful result cannot carry errors")
        if not self.ok and not self.errors:
            raise ValueError("failed result must carry at least one error")
        return self

    def error_types(self) -> List[ErrorType]:
        """Error types in report order."""
        return [e.error_type for e in self.errors]


def ok(value: Any) -> Result:
    """Create a successful result."""
    return Result(ok=True, value=value)


def err(errors: Sequence[NormalizationError]) -> Result:
    """Create a failed result from a non-empty error list."""
    return Result(ok=False, errors=list(errors))
