"""Rule DSL for tagthem.

This module provides:
- Lexer: Tokenizes rule expression strings
- Parser: Produces AST from tokens
- Evaluator: Evaluates AST against a tag index, recursively
- SolverOrder: Cached preorder linearization for repeated evaluation
"""

from tagthem.dsl.evaluator import (
    EvaluationError,
    Evaluator,
    evaluate,
    evaluate_expression,
)
from tagthem.dsl.expression import (
    And,
    ASTNode,
    Not,
    Or,
    TagIndex,
    TagReference,
    Unit,
    iter_tag_references,
    match_tag,
    pretty_format,
)
from tagthem.dsl.lexer import Lexer, LexerError, Token, TokenType
from tagthem.dsl.parser import ParseError, Parser, parse
from tagthem.dsl.solver import SolverOrder

__all__ = [
    # Evaluator
    "EvaluationError",
    "Evaluator",
    "evaluate",
    "evaluate_expression",
    "SolverOrder",
    # Lexer
    "Lexer",
    "LexerError",
    "Token",
    "TokenType",
    # Parser
    "ParseError",
    "Parser",
    "parse",
    # AST
    "And",
    "ASTNode",
    "Not",
    "Or",
    "TagIndex",
    "TagReference",
    "Unit",
    "iter_tag_references",
    "match_tag",
    "pretty_format",
]
