"""Traversal of nested data for the tagthem tagger.

Walks a generic value tree (mappings, lists, dataclass records and
str/int/float scalars), computes a dotted field path for each scalar leaf
and runs every matching extractor on it.

Field path naming:
- mapping keys and record fields: ``parent.key`` (``key`` at the root)
- list elements: ``parent.index(i)`` (``index(i)`` at the root)
- a scalar root has the empty path ""
"""

import dataclasses
import json
import logging
from collections.abc import Iterable, Mapping, Sequence
from enum import Enum
from typing import Any

from tagthem.tagger.extractors import (
    Extractor,
    ExtractorError,
    ExtractorKind,
    FloatExtractor,
    IntExtractor,
    StringExtractor,
)
from tagthem.tagger.types import ExtractorResult, FieldInfo

logger = logging.getLogger(__name__)


class ValueKind(Enum):
    """The closed set of value shapes the traversal understands."""

    STRING = "string"
    INTEGER = "int"
    FLOAT = "float"
    RECORD = "record"
    MAP = "map"
    LIST = "list"
    UNSUPPORTED = "unsupported"


_SCALAR_EXTRACTOR_KINDS = {
    ValueKind.STRING: ExtractorKind.STRING,
    ValueKind.INTEGER: ExtractorKind.INTEGER,
    ValueKind.FLOAT: ExtractorKind.FLOAT,
}


def classify(value: Any) -> ValueKind:
    """Return the kind of a value; anything unrecognized is UNSUPPORTED."""
    # bool is an int subclass but is not tagged as a number
    if isinstance(value, bool) or value is None:
        return ValueKind.UNSUPPORTED
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, int):
        return ValueKind.INTEGER
    if isinstance(value, float):
        return ValueKind.FLOAT
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return ValueKind.RECORD
    if isinstance(value, Mapping):
        return ValueKind.MAP
    if isinstance(value, (list, tuple)):
        return ValueKind.LIST
    return ValueKind.UNSUPPORTED


def is_valid_field_path(
    field_path: str,
    include_paths: Sequence[str] | None = None,
    exclude_paths: Sequence[str] | None = None,
) -> bool:
    """Return True if the field path should be tagged.

    A path under any exclude prefix is skipped. Otherwise, when include
    prefixes are given, the path must be under one of them.
    """
    if exclude_paths and any(field_path.startswith(p) for p in exclude_paths):
        return False

    if include_paths:
        return any(field_path.startswith(p) for p in include_paths)

    return True


def _child_path(parent: str, name: str) -> str:
    return f"{parent}.{name}" if parent else name


class Tagger:
    """Runs extractors over every scalar field of a data value.

    Usage:
        tagger = Tagger(string_extractors=[PatternExtractor({"greeting": ["hello"]})])
        fields = tagger.tag_object({"title": "hello world", "tags": ["x"]})
        fields_by_tag(fields)  # {"greeting": ["title"]}
    """

    def __init__(
        self,
        string_extractors: Iterable[StringExtractor] = (),
        int_extractors: Iterable[IntExtractor] = (),
        float_extractors: Iterable[FloatExtractor] = (),
    ):
        self._extractors: dict[ExtractorKind, list[Extractor]] = {
            ExtractorKind.STRING: list(string_extractors),
            ExtractorKind.INTEGER: list(int_extractors),
            ExtractorKind.FLOAT: list(float_extractors),
        }

    def add_extractor(self, extractor: Extractor, kind: ExtractorKind) -> None:
        """Register an extractor for one scalar kind."""
        self._extractors[kind].append(extractor)

    def extractors(self, kind: ExtractorKind) -> list[Extractor]:
        """List the extractors registered for a scalar kind."""
        return list(self._extractors[kind])

    # -------------------------------------------------------------------------
    # Public entry points
    # -------------------------------------------------------------------------

    def tag_object(
        self,
        data: Any,
        include_paths: Sequence[str] | None = None,
        exclude_paths: Sequence[str] | None = None,
    ) -> list[FieldInfo]:
        """Tag every scalar field of ``data``.

        Args:
            data: Mapping/list/dataclass tree or a single scalar
            include_paths: Only tag fields under these path prefixes
            exclude_paths: Never tag fields under these path prefixes

        Returns:
            One FieldInfo per tagged scalar, in traversal order

        Raises:
            ExtractorError: If any extractor fails; nothing is returned then
        """
        fields_info: list[FieldInfo] = []
        self._visit(data, "", fields_info, include_paths, exclude_paths)
        logger.debug("Tagged %d field(s)", len(fields_info))
        return fields_info

    def tag_json(
        self,
        raw_json: str | bytes,
        include_paths: Sequence[str] | None = None,
        exclude_paths: Sequence[str] | None = None,
    ) -> list[FieldInfo]:
        """Decode a JSON document and tag its fields.

        Raises:
            json.JSONDecodeError: If the document is not valid JSON
        """
        return self.tag_object(json.loads(raw_json), include_paths, exclude_paths)

    def tag_text(self, text: str) -> dict[str, ExtractorResult]:
        """Tag a single string and return the results keyed by extractor."""
        return self._run_extractors(ExtractorKind.STRING, text, "")

    # -------------------------------------------------------------------------
    # Traversal
    # -------------------------------------------------------------------------

    def _visit(
        self,
        data: Any,
        field_path: str,
        fields_info: list[FieldInfo],
        include_paths: Sequence[str] | None,
        exclude_paths: Sequence[str] | None,
    ) -> None:
        kind = classify(data)

        if kind in _SCALAR_EXTRACTOR_KINDS:
            if not is_valid_field_path(field_path, include_paths, exclude_paths):
                return
            results = self._run_extractors(
                _SCALAR_EXTRACTOR_KINDS[kind], data, field_path
            )
            fields_info.append(FieldInfo(name=field_path, extractors=results))
            return

        if kind == ValueKind.RECORD:
            for record_field in dataclasses.fields(data):
                if record_field.name.startswith("_"):
                    continue
                self._visit(
                    getattr(data, record_field.name),
                    _child_path(field_path, record_field.name),
                    fields_info,
                    include_paths,
                    exclude_paths,
                )

        elif kind == ValueKind.MAP:
            for key, value in data.items():
                if not isinstance(key, str):
                    logger.debug(
                        "Skipping non-string key %r under '%s'", key, field_path
                    )
                    continue
                self._visit(
                    value,
                    _child_path(field_path, key),
                    fields_info,
                    include_paths,
                    exclude_paths,
                )

        elif kind == ValueKind.LIST:
            for i, value in enumerate(data):
                self._visit(
                    value,
                    _child_path(field_path, f"index({i})"),
                    fields_info,
                    include_paths,
                    exclude_paths,
                )

        else:
            logger.debug(
                "Skipping unsupported %s value at '%s'",
                type(data).__name__,
                field_path,
            )

    def _run_extractors(
        self, kind: ExtractorKind, value: Any, field_path: str
    ) -> dict[str, ExtractorResult]:
        """Run every extractor of ``kind`` that accepts ``value``."""
        results: dict[str, ExtractorResult] = {}

        for extractor in self._extractors[kind]:
            try:
                if not extractor.is_valid(value):
                    continue
                tags, run_data = extractor.extract_tags(value)
            except ExtractorError:
                raise
            except Exception as e:
                raise ExtractorError(str(e), extractor.name, field_path) from e

            results[extractor.name] = ExtractorResult(
                tags=list(tags or []), run_data=run_data
            )

        return results
