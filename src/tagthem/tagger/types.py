"""Tagger result types.

- ExtractorResult: tags and run data produced by one extractor for one field
- FieldInfo: everything the extractors reported for one scalar field
- fields_by_tag: derives the tag index consumed by rule evaluation
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass
class ExtractorResult:
    """Output of one extractor for one value.

    Attributes:
        tags: Tags the extractor reported
        run_data: Extractor-defined payload (e.g. which patterns matched)
    """

    tags: list[str] = field(default_factory=list)
    run_data: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {"tags": list(self.tags), "runData": self.run_data}


@dataclass
class FieldInfo:
    """Extractor output for one scalar field.

    Attributes:
        name: Dotted field path ("" for a scalar root)
        extractors: Results keyed by extractor name
    """

    name: str
    extractors: dict[str, ExtractorResult] = field(default_factory=dict)

    @property
    def tags(self) -> list[str]:
        """Unique tags reported for this field, in extractor order."""
        seen: list[str] = []
        for result in self.extractors.values():
            for tag in result.tags:
                if tag not in seen:
                    seen.append(tag)
        return seen

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "extractors": {
                name: result.to_dict() for name, result in self.extractors.items()
            },
        }


def fields_by_tag(fields_info: Iterable[FieldInfo]) -> dict[str, list[str]]:
    """Map every tag found to the field paths where it was found."""
    index: dict[str, list[str]] = {}
    for field_info in fields_info:
        for tag in field_info.tags:
            index.setdefault(tag, []).append(field_info.name)
    return index


def text_tag_index(results: Mapping[str, ExtractorResult]) -> dict[str, None]:
    """Build a tag index from the results of tagging raw text.

    Raw text has no field paths, so every tag maps to None and only
    unscoped tag references can match it.
    """
    index: dict[str, None] = {}
    for result in results.values():
        for tag in result.tags:
            index[tag] = None
    return index
