"""tagthem - tag nested data with pluggable extractors and match boolean tag rules.

    from tagthem import RuleEngine, Tagger
    from tagthem.extractors import PatternExtractor

    tagger = Tagger(string_extractors=[PatternExtractor({"greeting": [r"\\bhello\\b"]})])
    engine = RuleEngine.with_rules({"welcome": ['"greeting:title"']}, tagger=tagger)
    engine.process({"title": "hello there"})
    # {"welcome": ['"greeting:title"']}
"""

from tagthem.dsl import (
    EvaluationError,
    LexerError,
    ParseError,
    SolverOrder,
    TagReference,
    evaluate,
    parse,
    pretty_format,
)
from tagthem.rules import RuleEngine
from tagthem.tagger import ExtractorError, FieldInfo, Tagger, fields_by_tag

__version__ = "0.1.0"

__all__ = [
    "EvaluationError",
    "ExtractorError",
    "FieldInfo",
    "LexerError",
    "ParseError",
    "RuleEngine",
    "SolverOrder",
    "TagReference",
    "Tagger",
    "evaluate",
    "fields_by_tag",
    "parse",
    "pretty_format",
]
