"""Recursive evaluator for the tagthem rule DSL.

Walks the AST and computes a boolean against a tag index (tag name ->
field paths where the tag was found).
"""

from tagthem.dsl.expression import And, ASTNode, Not, Or, TagIndex, Unit, match_tag
from tagthem.dsl.parser import parse


class EvaluationError(Exception):
    """A node is missing a required operand or has an unknown type."""
    pass


class Evaluator:
    """Evaluates an expression AST against a tag index.

    Both operands of AND/OR are always evaluated. Tags absent from the index
    evaluate to False rather than raising. Recursion follows the tree depth;
    SolverOrder evaluates very long and/or chains without recursing.

    Usage:
        evaluator = Evaluator({"tagA": ["user.name"]})
        result = evaluator.evaluate(ast)
    """

    def __init__(self, tag_index: TagIndex):
        self.tag_index = tag_index

    def evaluate(self, node: ASTNode) -> bool:
        """Evaluate an AST node and return the result."""
        method_name = f"_eval_{type(node).__name__.lower()}"
        method = getattr(self, method_name, None)

        if method is None:
            raise EvaluationError(f"Unknown node type: {type(node).__name__}")

        return method(node)

    # -------------------------------------------------------------------------
    # Node type evaluators
    # -------------------------------------------------------------------------

    def _eval_unit(self, node: Unit) -> bool:
        return match_tag(node.tag, self.tag_index)

    def _eval_and(self, node: And) -> bool:
        left, right = self._operands(node)
        return left and right

    def _eval_or(self, node: Or) -> bool:
        left, right = self._operands(node)
        return left or right

    def _eval_not(self, node: Not) -> bool:
        if node.operand is None:
            raise EvaluationError(f"NOT node has no operand: {node!r}")
        return not self.evaluate(node.operand)

    def _operands(self, node: And | Or) -> tuple[bool, bool]:
        if node.left is None or node.right is None:
            raise EvaluationError(
                f"{node.kind} node is missing its left or right operand: {node!r}"
            )
        return self.evaluate(node.left), self.evaluate(node.right)


def evaluate(node: ASTNode, tag_index: TagIndex) -> bool:
    """Evaluate a parsed expression against a tag index."""
    return Evaluator(tag_index).evaluate(node)


def evaluate_expression(
    expression: str,
    tag_index: TagIndex,
    case_sensitive: bool = False,
) -> bool:
    """Parse an expression string and evaluate it against a tag index.

    Example:
        evaluate_expression(
            '"tagA" and ("tagB" or "tagC")',
            {"tagA": ["title"], "tagC": ["body"]},
        )
        # True
    """
    return evaluate(parse(expression, case_sensitive=case_sensitive), tag_index)
