from enum import Enum
from typing import Literal, TypeAlias

DiagnosticSeverity: TypeAlias = Literal["error"]
DiagnosticValue: TypeAlias = str | int | bool


class ErrorCode(str, Enum):
    """Canonical internal diagnostic codes."""

    RANK_MISMATCH = "rank_mismatch"
    DIM_OUT_OF_RANGE = "dim_out_of_range"
    INDEX_OUT_OF_RANGE = "index_out_of_range"
    REPEATED_DIM = "repeated_dim"
    SIZE_MISMATCH = "size_mismatch"
    NUMEL_MISMATCH = "numel_mismatch"
    BROADCAST_MISMATCH = "broadcast_mismatch"
    AMBIGUOUS_SHAPE = "ambiguous_shape"
    UNSUPPORTED_LAYOUT = "unsupported_layout"
    EMPTY_TENSOR_LIST = "empty_tensor_list"
    INVALID_ARGUMENT = "invalid_argument"
    OUTPUT_ALIASES_INPUT = "output_aliases_input"
    STORAGE_OUT_OF_BOUNDS = "storage_out_of_bounds"
    NOT_A_VIEW = "not_a_view"


class GeometryError(ValueError):
    """Structured base error for geometry and view diagnostics."""

    severity: DiagnosticSeverity
    code: str
    external_code: str
    help: str | None
    related: tuple[str, ...]
    data: dict[str, DiagnosticValue]
    message: str

    @staticmethod
    def _normalize_code(code: str | ErrorCode) -> str:
        """Normalize code to canonical internal `snake_case` form."""
        if isinstance(code, ErrorCode):
            return code.value

        if not isinstance(code, str):
            raise TypeError("diagnostic code must be a string or ErrorCode")
        if not code:
            raise ValueError("diagnostic code cannot be empty")
        if any(char.isspace() for char in code):
            raise ValueError("diagnostic code cannot contain whitespace")

        upper_allowed = all(
            char.isupper() or char.isdigit() or char == "_" for char in code
        )
        lower_allowed = all(
            char.islower() or char.isdigit() or char == "_" for char in code
        )
        if upper_allowed and code[0].isalpha():
            return code.lower()
        if lower_allowed and code[0].isalpha():
            return code

        raise ValueError(
            "diagnostic code must be snake_case (or UPPER_SNAKE for compatibility)"
        )

    @staticmethod
    def _normalize_related(related: tuple[str, ...]) -> tuple[str, ...]:
        """Validate related notes."""
        for note in related:
            if not isinstance(note, str):
                raise TypeError("related diagnostics must be tuple[str, ...]")
            if not note.strip():
                raise ValueError("related diagnostic note cannot be empty")
        return tuple(related)

    @staticmethod
    def _normalize_data(data: dict[str, DiagnosticValue]) -> dict[str, DiagnosticValue]:
        """Validate and copy diagnostic payload data."""
        normalized_data: dict[str, DiagnosticValue] = {}
        for key, value in data.items():
            if not isinstance(key, str):
                raise TypeError("diagnostic data keys must be strings")
            if not isinstance(value, str | int | bool):
                raise TypeError(
                    "diagnostic data values must be str, int, or bool entries"
                )
            normalized_data[key] = value
        return normalized_data

    def __init__(
        self,
        *,
        code: str | ErrorCode,
        message: str,
        help: str | None = None,
        related: tuple[str, ...] = (),
        data: dict[str, DiagnosticValue] | None = None,
    ) -> None:
        """Build one structured geometry error."""
        normalized_code = self._normalize_code(code)
        if not isinstance(message, str):
            raise TypeError("diagnostic message must be a string")
        if not message.strip():
            raise ValueError("diagnostic message cannot be empty")
        if help is not None and not isinstance(help, str):
            raise TypeError("diagnostic help must be a string or None")

        payload_data = {} if data is None else data
        self.code = normalized_code
        self.external_code = normalized_code.upper()
        self.severity = "error"
        self.help = help
        self.related = self._normalize_related(related)
        self.data = self._normalize_data(payload_data)
        self.message = message
        super().__init__(message)


class RankError(GeometryError):
    """Tensor has the wrong number of dimensions for the operation."""


class DimensionOutOfRangeError(GeometryError, IndexError):
    """Dimension or index lies outside its valid range after wrapping."""


class RepeatedDimensionError(GeometryError):
    """Permutation uses one dimension more than once."""


class SizeMismatchError(GeometryError):
    """Sizes do not reconcile (concatenation, split, broadcast, numel)."""


class AmbiguousShapeError(GeometryError):
    """Shape has more than one inferred (`-1`) dimension."""


class UnsupportedLayoutError(GeometryError):
    """Operation requires a layout the tensor does not have."""


class EmptyListError(GeometryError):
    """Operation received an empty tensor list."""


class InvalidArgumentError(GeometryError):
    """Scalar argument outside its legal domain."""


class NotAViewError(GeometryError):
    """Requested view is not expressible as a stride reinterpretation."""


SizeError = SizeMismatchError
RepeatedDimError = RepeatedDimensionError


__all__ = [
    "AmbiguousShapeError",
    "DimensionOutOfRangeError",
    "EmptyListError",
    "ErrorCode",
    "GeometryError",
    "InvalidArgumentError",
    "NotAViewError",
    "RankError",
    "RepeatedDimError",
    "RepeatedDimensionError",
    "SizeError",
    "SizeMismatchError",
    "UnsupportedLayoutError",
]
