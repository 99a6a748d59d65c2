"""AST node types for the tagthem rule DSL.

A parsed rule expression is a tree of immutable nodes:
- Unit: a single tag reference, optionally scoped to a field path
- And / Or: binary boolean connectives
- Not: unary negation

Nodes never change after the parser builds them, so one tree can be
evaluated from several threads at once.
"""

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import ClassVar

# Evidence consumed by the evaluators: tag name -> field paths where the tag
# was reported. A value of None means the tag was seen without field
# information (e.g. when tagging raw text).
TagIndex = Mapping[str, Sequence[str] | None]


@dataclass(frozen=True)
class TagReference:
    """The tag a literal refers to and its optional field path scope."""

    name: str
    field_path: str = ""

    def __str__(self) -> str:
        if self.field_path:
            return f"{self.name}[{self.field_path}]"
        return self.name


@dataclass(frozen=True)
class ASTNode:
    """Base class for AST nodes."""

    kind: ClassVar[str] = "UNSET"


@dataclass(frozen=True)
class Unit(ASTNode):
    """A leaf condition: the referenced tag was found."""

    kind: ClassVar[str] = "UNIT"
    tag: TagReference


@dataclass(frozen=True)
class And(ASTNode):
    """Both operands are true."""

    kind: ClassVar[str] = "AND"
    left: ASTNode | None
    right: ASTNode | None


@dataclass(frozen=True)
class Or(ASTNode):
    """At least one operand is true."""

    kind: ClassVar[str] = "OR"
    left: ASTNode | None
    right: ASTNode | None


@dataclass(frozen=True)
class Not(ASTNode):
    """The operand is false."""

    kind: ClassVar[str] = "NOT"
    operand: ASTNode | None


def children(node: ASTNode) -> tuple[ASTNode | None, ...]:
    """Return the child slots of a node, left to right (None when unset)."""
    if isinstance(node, (And, Or)):
        return (node.left, node.right)
    if isinstance(node, Not):
        return (node.operand,)
    return ()


def match_tag(reference: TagReference, tag_index: TagIndex) -> bool:
    """Check a tag reference against a tag index.

    The tag must be present. A scoped reference additionally needs at least
    one recorded field path that starts with its scope. Tags missing from the
    index never match.
    """
    if reference.name not in tag_index:
        return False
    if not reference.field_path:
        return True

    field_paths = tag_index[reference.name] or ()
    return any(path.startswith(reference.field_path) for path in field_paths)


def iter_tag_references(node: ASTNode) -> Iterator[TagReference]:
    """Yield the tag references of a tree in preorder."""
    stack = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, Unit):
            yield current.tag
            continue
        stack.extend(child for child in reversed(children(current)) if child is not None)


def pretty_format(node: ASTNode) -> str:
    """Format the expression as a tabbed tree, one node per line.

    Eg: for the expression ("a" and "b:x.y") or "c"
        OR
            AND
                a
                b[x.y]
            c
    """
    lines: list[str] = []
    stack = [(node, 0)]
    while stack:
        current, level = stack.pop()
        indent = "    " * level
        if isinstance(current, Unit):
            lines.append(f"{indent}{current.tag}\n")
            continue
        lines.append(f"{indent}{current.kind}\n")
        stack.extend(
            (child, level + 1)
            for child in reversed(children(current))
            if child is not None
        )
    return "".join(lines)
