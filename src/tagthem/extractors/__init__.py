"""Extractor registry and canned extractors for tagthem.

Usage:
    from tagthem.extractors import register_builtin_extractors, ExtractorRegistry

    register_builtin_extractors()
    extractor = ExtractorRegistry.create(ExtractorDefinition.from_dict({
        "type": "pattern",
        "params": {"tags": {"greeting": ["\\bhello\\b"]}},
    }))
"""

from tagthem.extractors.canned import (
    NumericRange,
    PatternExtractor,
    RangeExtractor,
    register_canned_extractors,
)
from tagthem.extractors.registry import (
    ExtractorDefinition,
    ExtractorFactory,
    ExtractorRegistry,
)


def register_builtin_extractors() -> None:
    """Register framework-provided extractor types.

    Called before building extractors from configuration.
    """
    register_canned_extractors()


__all__ = [
    "ExtractorDefinition",
    "ExtractorFactory",
    "ExtractorRegistry",
    "NumericRange",
    "PatternExtractor",
    "RangeExtractor",
    "register_builtin_extractors",
]
