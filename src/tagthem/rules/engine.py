"""Rule engine for tagthem.

Owns named rules (each a list of DSL expressions) and evaluates them
against tag evidence. Combined with a Tagger it goes straight from data to
matched rules:

    engine = RuleEngine(tagger)
    engine.add_rule("contact", ['"email" or "phone:user"'])
    engine.process({"user": {"phone": "555-0100"}})
    # {"contact": ['"email" or "phone:user"']}

Registration is a configuration-time, single-writer step. Once rules are
registered, evaluate/process may be called from several threads.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from tagthem.dsl import ASTNode, Evaluator, Parser, SolverOrder, TagIndex
from tagthem.tagger import Tagger, fields_by_tag, text_tag_index

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompiledExpression:
    """A parsed rule expression with its source text.

    Attributes:
        source: The expression exactly as registered
        expression: The parsed AST
        solver_order: Cached linearization of ``expression``
        tags: Tag names the expression references
        field_paths: Field path scopes the expression references
    """

    source: str
    expression: ASTNode
    solver_order: SolverOrder
    tags: tuple[str, ...] = ()
    field_paths: tuple[str, ...] = ()

    @classmethod
    def compile(cls, source: str, case_sensitive: bool = False) -> "CompiledExpression":
        """Parse ``source``; LexerError/ParseError propagate."""
        parser = Parser(source, case_sensitive=case_sensitive)
        expression = parser.parse()
        return cls(
            source=source,
            expression=expression,
            solver_order=SolverOrder.from_expression(expression),
            tags=tuple(parser.tags),
            field_paths=tuple(parser.field_paths),
        )


class RuleEngine:
    """Registry and evaluator for named tag rules.

    A rule matches when any of its expressions evaluates to true; the result
    of an evaluation lists, per matching rule, the source text of every
    expression that matched.
    """

    def __init__(self, tagger: Tagger | None = None, case_sensitive: bool = False):
        self.tagger = tagger
        self.case_sensitive = case_sensitive
        self._rules: dict[str, list[CompiledExpression]] = {}
        self._tags: set[str] = set()
        self._fields: set[str] = set()

    @classmethod
    def with_rules(
        cls,
        rules_by_name: Mapping[str, Sequence[str]],
        tagger: Tagger | None = None,
        case_sensitive: bool = False,
    ) -> "RuleEngine":
        """Create an engine and register ``rules_by_name`` atomically."""
        engine = cls(tagger=tagger, case_sensitive=case_sensitive)
        engine.add_rules(rules_by_name)
        return engine

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def add_rule(self, name: str, expressions: Sequence[str]) -> None:
        """Parse and register expressions under a rule name.

        Every expression is parsed before anything is stored, so a single
        invalid expression leaves the engine unchanged. Adding to an existing
        rule appends to its expressions.

        Raises:
            LexerError: If an expression cannot be tokenized
            ParseError: If an expression is not well formed
        """
        self.add_rules({name: expressions})

    def add_rules(self, rules_by_name: Mapping[str, Sequence[str]]) -> None:
        """Register several rules; all of them or none are stored."""
        compiled: list[tuple[str, list[CompiledExpression]]] = []
        for name, expressions in rules_by_name.items():
            if isinstance(expressions, str):
                raise TypeError(
                    f"Rule '{name}' expressions must be a list of strings, not a string"
                )
            for source in expressions:
                if not isinstance(source, str):
                    raise TypeError(
                        f"Rule '{name}' expressions must be strings, got {source!r}"
                    )
            compiled.append(
                (
                    name,
                    [
                        CompiledExpression.compile(source, self.case_sensitive)
                        for source in expressions
                    ],
                )
            )

        for name, expressions in compiled:
            self._rules.setdefault(name, []).extend(expressions)
            self._index(expressions)
            logger.debug(
                "Registered rule '%s' with %d expression(s)", name, len(expressions)
            )

    def remove_rule(self, name: str) -> None:
        """Remove a rule so it can be registered again from scratch.

        Raises:
            KeyError: If no rule has this name
        """
        if name not in self._rules:
            raise KeyError(f"Rule '{name}' is not registered")
        del self._rules[name]

        self._tags.clear()
        self._fields.clear()
        for expressions in self._rules.values():
            self._index(expressions)

    def _index(self, expressions: Iterable[CompiledExpression]) -> None:
        for compiled in expressions:
            self._tags.update(compiled.tags)
            self._fields.update(compiled.field_paths)

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    @property
    def rule_names(self) -> list[str]:
        """Registered rule names, in registration order."""
        return list(self._rules)

    def get_rule(self, name: str) -> list[str]:
        """Source texts of a rule's expressions.

        Raises:
            KeyError: If no rule has this name
        """
        if name not in self._rules:
            raise KeyError(f"Rule '{name}' is not registered")
        return [compiled.source for compiled in self._rules[name]]

    @property
    def tag_names(self) -> list[str]:
        """Unique tag names referenced by any rule."""
        return sorted(self._tags)

    @property
    def field_paths(self) -> list[str]:
        """Unique field path scopes referenced by any rule.

        Useful as ``include_paths`` to restrict tagging to relevant fields.
        """
        return sorted(self._fields)

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    def evaluate(self, tag_index: TagIndex, *, solver: bool = True) -> dict[str, list[str]]:
        """Evaluate every registered expression against a tag index.

        Args:
            tag_index: Tag name -> field paths where the tag was found
            solver: Use each expression's cached solver order; the recursive
                evaluator is used when False. Both give the same results.

        Returns:
            Matching rule name -> source texts of its matching expressions.
            Rules without a match are absent.

        Raises:
            EvaluationError: If a stored expression is structurally broken
        """
        evaluator = Evaluator(tag_index)
        expressions_by_rule: dict[str, list[str]] = {}

        for name, expressions in self._rules.items():
            for compiled in expressions:
                if solver:
                    matched = compiled.solver_order.solve(tag_index)
                else:
                    matched = evaluator.evaluate(compiled.expression)
                if matched:
                    expressions_by_rule.setdefault(name, []).append(compiled.source)

        return expressions_by_rule

    def process(
        self,
        data: Any,
        include_paths: Sequence[str] | None = None,
        exclude_paths: Sequence[str] | None = None,
    ) -> dict[str, list[str]]:
        """Tag ``data`` and evaluate all rules against the tags found."""
        fields_info = self._require_tagger().tag_object(data, include_paths, exclude_paths)
        return self.evaluate(fields_by_tag(fields_info))

    def process_json(
        self,
        raw_json: str | bytes,
        include_paths: Sequence[str] | None = None,
        exclude_paths: Sequence[str] | None = None,
    ) -> dict[str, list[str]]:
        """Decode a JSON document, tag it and evaluate all rules."""
        fields_info = self._require_tagger().tag_json(raw_json, include_paths, exclude_paths)
        return self.evaluate(fields_by_tag(fields_info))

    def process_text(self, text: str) -> dict[str, list[str]]:
        """Tag raw text and evaluate all rules.

        Text has no field paths, so scoped tag references never match.
        """
        results = self._require_tagger().tag_text(text)
        return self.evaluate(text_tag_index(results))

    def _require_tagger(self) -> Tagger:
        if self.tagger is None:
            raise RuntimeError("RuleEngine has no tagger; pass one to process data")
        return self.tagger
