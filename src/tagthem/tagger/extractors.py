"""Extractor contracts for the tagthem tagger.

Extractors classify one scalar value (string, integer or float) into zero
or more tags. The tagger calls ``is_valid`` first and only calls
``extract_tags`` for extractors that accept the value. Extractors are
implemented outside the core (see ``tagthem.extractors`` for the canned
ones) and must not keep per-call state.
"""

from enum import Enum
from typing import Any, Protocol, runtime_checkable


class ExtractorKind(Enum):
    """Scalar kind an extractor handles."""

    STRING = "string"
    INTEGER = "int"
    FLOAT = "float"


class ExtractorError(Exception):
    """An extractor failed while tagging a field.

    Attributes:
        extractor: Name of the failing extractor
        field: Dotted path of the field being tagged ("" for the root)
    """

    def __init__(self, message: str, extractor: str, field: str = ""):
        self.extractor = extractor
        self.field = field
        super().__init__(
            f"Extractor '{extractor}' failed on field '{field}': {message}"
        )


@runtime_checkable
class StringExtractor(Protocol):
    """Protocol for extractors of string values."""

    name: str

    def is_valid(self, value: str) -> bool:
        """Return True if this extractor should process the value."""
        ...

    def extract_tags(self, value: str) -> tuple[list[str], Any]:
        """Return the tags found in the value and extractor-defined run data."""
        ...


@runtime_checkable
class IntExtractor(Protocol):
    """Protocol for extractors of integer values."""

    name: str

    def is_valid(self, value: int) -> bool:
        ...

    def extract_tags(self, value: int) -> tuple[list[str], Any]:
        ...


@runtime_checkable
class FloatExtractor(Protocol):
    """Protocol for extractors of floating-point values."""

    name: str

    def is_valid(self, value: float) -> bool:
        ...

    def extract_tags(self, value: float) -> tuple[list[str], Any]:
        ...


Extractor = StringExtractor | IntExtractor | FloatExtractor
