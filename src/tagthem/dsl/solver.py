"""Cached linear evaluation of a parsed expression.

A SolverOrder is the preorder linearization of an expression tree (root
first, then the left subtree, then the right subtree) together with the
positions of every node's children. It is built once per parsed expression
and then solved against many tag indices: positions are visited in reverse,
so every child is computed before its parent.

Results live in a list allocated per ``solve`` call; the order itself and
the nodes it references are never written to, so one order can be solved
concurrently.
"""

from collections.abc import Iterator
from dataclasses import dataclass

from tagthem.dsl.evaluator import EvaluationError
from tagthem.dsl.expression import And, ASTNode, Not, Or, TagIndex, Unit, children, match_tag


@dataclass(frozen=True)
class SolverOrder:
    """Preorder node sequence with child positions.

    Attributes:
        nodes: Nodes in preorder; ``nodes[0]`` is the root
        child_positions: For each node, the positions of its child slots
            (None where the slot is empty)
    """

    nodes: tuple[ASTNode, ...]
    child_positions: tuple[tuple[int | None, ...], ...]

    @classmethod
    def from_expression(cls, root: ASTNode) -> "SolverOrder":
        """Linearize an expression tree in preorder."""
        nodes, child_positions = _linearize(root)
        return cls(
            nodes=tuple(nodes),
            child_positions=tuple(tuple(slots) for slots in child_positions),
        )

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[ASTNode]:
        return iter(self.nodes)

    def solve(self, tag_index: TagIndex) -> bool:
        """Evaluate the expression bottom-up against a tag index."""
        if not self.nodes:
            raise EvaluationError("Malformed solver order: no nodes")

        values = [False] * len(self.nodes)

        for position in range(len(self.nodes) - 1, -1, -1):
            node = self.nodes[position]
            slots = self.child_positions[position]

            if isinstance(node, Unit):
                values[position] = match_tag(node.tag, tag_index)
                continue

            if None in slots:
                raise EvaluationError(
                    f"{node.kind} node is missing a required operand: {node!r}"
                )

            if isinstance(node, And):
                values[position] = values[slots[0]] and values[slots[1]]
            elif isinstance(node, Or):
                values[position] = values[slots[0]] or values[slots[1]]
            elif isinstance(node, Not):
                values[position] = not values[slots[0]]
            else:
                raise EvaluationError(f"Unknown node type: {type(node).__name__}")

        return values[0]


def _linearize(
    root: ASTNode,
) -> tuple[list[ASTNode], list[list[int | None]]]:
    """Lay out ``root`` and its subtrees in preorder, without recursion.

    Long and/or chains parse into left-deep trees, so the walk keeps its
    own stack instead of using the interpreter's.
    """
    nodes: list[ASTNode] = []
    child_positions: list[list[int | None]] = []
    stack: list[tuple[ASTNode, int | None, int]] = [(root, None, 0)]

    while stack:
        node, parent, slot = stack.pop()
        position = len(nodes)
        nodes.append(node)

        slots = children(node)
        child_positions.append([None] * len(slots))
        if parent is not None:
            child_positions[parent][slot] = position

        # Reversed so the left child is laid out first
        for i in range(len(slots) - 1, -1, -1):
            if slots[i] is not None:
                stack.append((slots[i], position, i))

    return nodes, child_positions
