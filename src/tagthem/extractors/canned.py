"""Canned extractors for tagthem.

Ready-to-use extractors that can be declared in configuration:
- pattern: tag strings matching regular expressions (string)
- range: tag numbers falling inside inclusive ranges (int, float)
"""

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from tagthem.extractors.registry import ExtractorDefinition, ExtractorRegistry
from tagthem.tagger import ExtractorKind


# =============================================================================
# Pattern Extractor
# =============================================================================


class PatternExtractor:
    """Tags strings matching any of a tag's regular expressions.

    Run data maps every reported tag to the patterns that matched, so
    callers can tell why a field was tagged.

    Params:
        tags: Mapping of tag name to a list of regular expressions
        ignoreCase: Match case-insensitively (default: false)
    """

    def __init__(
        self,
        patterns_by_tag: Mapping[str, Sequence[str]],
        name: str = "pattern",
        ignore_case: bool = False,
    ):
        self.name = name
        flags = re.IGNORECASE if ignore_case else 0
        self._patterns: list[tuple[str, str, re.Pattern[str]]] = []

        if not isinstance(patterns_by_tag, Mapping):
            raise ValueError("'tags' must be a mapping of tag name to patterns")

        for tag, patterns in patterns_by_tag.items():
            if isinstance(patterns, str):
                patterns = [patterns]
            if not isinstance(patterns, (list, tuple)):
                raise ValueError(f"Patterns for tag '{tag}' must be a list of strings")
            for pattern in patterns:
                if not isinstance(pattern, str):
                    raise ValueError(
                        f"Pattern {pattern!r} for tag '{tag}' must be a string"
                    )
                try:
                    compiled = re.compile(pattern, flags)
                except re.error as e:
                    raise ValueError(
                        f"Invalid pattern {pattern!r} for tag '{tag}': {e}"
                    ) from e
                self._patterns.append((tag, pattern, compiled))

    def is_valid(self, value: str) -> bool:
        return value != ""

    def extract_tags(self, value: str) -> tuple[list[str], dict[str, list[str]]]:
        patterns_by_tag: dict[str, list[str]] = {}
        for tag, pattern, compiled in self._patterns:
            if compiled.search(value):
                patterns_by_tag.setdefault(tag, []).append(pattern)
        return list(patterns_by_tag), patterns_by_tag


def _pattern_factory(definition: ExtractorDefinition) -> PatternExtractor:
    """Factory for creating PatternExtractor from definition."""
    return PatternExtractor(
        patterns_by_tag=definition.params.get("tags") or {},
        name=definition.name,
        ignore_case=definition.params.get("ignoreCase", False),
    )


# =============================================================================
# Range Extractor
# =============================================================================


@dataclass(frozen=True)
class NumericRange:
    """Inclusive numeric bounds; a missing bound is open."""

    min: float | None = None
    max: float | None = None

    def __contains__(self, value: float) -> bool:
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True


class RangeExtractor:
    """Tags integers and floats falling inside configured ranges.

    Params:
        tags: Mapping of tag name to {min, max}; either bound may be omitted
    """

    def __init__(self, ranges_by_tag: Mapping[str, Mapping[str, Any]], name: str = "range"):
        self.name = name
        self._ranges: dict[str, NumericRange] = {}

        if not isinstance(ranges_by_tag, Mapping):
            raise ValueError("'tags' must be a mapping of tag name to {min, max}")

        for tag, bounds in ranges_by_tag.items():
            if bounds is None:
                bounds = {}
            if not isinstance(bounds, Mapping):
                raise ValueError(f"Range for tag '{tag}' must be a mapping with min/max")
            unknown = set(bounds) - {"min", "max"}
            if unknown:
                raise ValueError(
                    f"Range for tag '{tag}' has unknown keys: {', '.join(sorted(unknown))}"
                )
            for key in ("min", "max"):
                bound = bounds.get(key)
                if bound is not None and (
                    isinstance(bound, bool) or not isinstance(bound, (int, float))
                ):
                    raise ValueError(
                        f"Range for tag '{tag}' has a non-numeric {key}: {bound!r}"
                    )
            self._ranges[tag] = NumericRange(bounds.get("min"), bounds.get("max"))

    def is_valid(self, value: float) -> bool:
        # NaN is outside every range
        return value == value

    def extract_tags(self, value: float) -> tuple[list[str], None]:
        return [tag for tag, bounds in self._ranges.items() if value in bounds], None


def _range_factory(definition: ExtractorDefinition) -> RangeExtractor:
    """Factory for creating RangeExtractor from definition."""
    return RangeExtractor(
        ranges_by_tag=definition.params.get("tags") or {},
        name=definition.name,
    )


def register_canned_extractors() -> None:
    """Register the canned extractor types with the ExtractorRegistry."""
    ExtractorRegistry.register_factory(
        "pattern", _pattern_factory, kinds=[ExtractorKind.STRING]
    )
    ExtractorRegistry.register_factory(
        "range", _range_factory, kinds=[ExtractorKind.INTEGER, ExtractorKind.FLOAT]
    )
