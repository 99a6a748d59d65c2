"""tagthem tagger.

Walks nested data, routes each scalar field to the extractors registered
for its kind and records the tags they report:

    from tagthem.tagger import Tagger, fields_by_tag

    tagger = Tagger(string_extractors=[my_extractor])
    fields = tagger.tag_object({"user": {"name": "Ann"}})
    index = fields_by_tag(fields)  # {"some_tag": ["user.name"]}
"""

from tagthem.tagger.extractors import (
    Extractor,
    ExtractorError,
    ExtractorKind,
    FloatExtractor,
    IntExtractor,
    StringExtractor,
)
from tagthem.tagger.tagger import Tagger, ValueKind, classify, is_valid_field_path
from tagthem.tagger.types import ExtractorResult, FieldInfo, fields_by_tag, text_tag_index

__all__ = [
    "Extractor",
    "ExtractorError",
    "ExtractorKind",
    "ExtractorResult",
    "FieldInfo",
    "FloatExtractor",
    "IntExtractor",
    "StringExtractor",
    "Tagger",
    "ValueKind",
    "classify",
    "fields_by_tag",
    "is_valid_field_path",
    "text_tag_index",
]
