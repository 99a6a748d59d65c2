"""Parser for the tagthem rule DSL.

Converts a stream of tokens into an Abstract Syntax Tree (AST).
Uses recursive descent: a single production is re-entered for every
parenthesized group.

Precedence (lowest to highest):
1. and / or - one shared level, chained left to right
   ("a" or "b" and "c" reads as ("a" or "b") and "c")
2. not - applies to exactly the next literal or group
3. literals and ( ) groups
"""

from dataclasses import dataclass

from tagthem.dsl.expression import And, ASTNode, Not, Or, TagReference, Unit
from tagthem.dsl.lexer import Lexer, Token, TokenType


class ParseError(Exception):
    """Error during parsing."""

    def __init__(self, message: str, token: Token):
        self.token = token
        super().__init__(f"{message} at position {token.position}")


_BINARY_OPS = {
    TokenType.AND: And,
    TokenType.OR: Or,
}


@dataclass
class _PendingNode:
    """Partially built node with open operand slots.

    ``op`` stays None until an operator is read; a pending node without an
    operator finalizes to its single operand.
    """

    op: TokenType | None = None
    left: ASTNode | None = None
    right: ASTNode | None = None

    def attach(self, operand: ASTNode, token: Token) -> None:
        """Fill the left slot if empty, otherwise the right slot."""
        if self.left is None:
            self.left = operand
            return
        if self.op is None or self.right is not None:
            raise ParseError(
                f"Missing operator before '{token.value}'", token
            )
        self.right = operand

    def build(self) -> ASTNode:
        return _BINARY_OPS[self.op](self.left, self.right)


class Parser:
    """Recursive descent parser for the rule DSL.

    Usage:
        parser = Parser('"tagA" and not ("tagB" or "tagC:sub.field")')
        ast = parser.parse()
        parser.tags         # ["tagA", "tagB", "tagC"]
        parser.field_paths  # ["sub.field"]
    """

    def __init__(self, source: str, case_sensitive: bool = False):
        self.source = source
        self.lexer = Lexer(source, case_sensitive=case_sensitive)
        self.depth = 0
        self.tags: list[str] = []
        self.field_paths: list[str] = []
        self._last: Token | None = None
        self._unscanned = False

    def parse(self) -> ASTNode:
        """Parse the expression and return the AST root."""
        return self._parse()

    # -------------------------------------------------------------------------
    # Token helpers
    # -------------------------------------------------------------------------

    def _scan(self) -> Token:
        """Read the next token, or the pushed-back one."""
        if self._unscanned:
            self._unscanned = False
            return self._last
        self._last = self.lexer.next_token()
        return self._last

    def _unscan(self) -> None:
        """Push the last read token back so the next scan returns it."""
        self._unscanned = True

    def _scan_ignore_whitespace(self) -> Token:
        token = self._scan()
        while token.type == TokenType.WHITESPACE:
            token = self._scan()
        return token

    # -------------------------------------------------------------------------
    # Productions
    # -------------------------------------------------------------------------

    def _parse(self) -> ASTNode:
        """Parse until ')' or end of input and return the built node."""
        node = _PendingNode()

        while True:
            token = self._scan_ignore_whitespace()

            if token.type == TokenType.LPAREN:
                node.attach(self._parse_group(token), token)

            elif token.type in (TokenType.TAG, TokenType.FIELD_PATH):
                self._unscan()
                node.attach(Unit(self._parse_tag_reference()), token)

            elif token.type in _BINARY_OPS:
                node = self._handle_binary_op(node, token)

            elif token.type == TokenType.NOT:
                node.attach(self._parse_not(token), token)

            elif token.type in (TokenType.RPAREN, TokenType.EOF):
                if token.type == TokenType.RPAREN:
                    self.depth -= 1
                if self.depth < 0:
                    raise ParseError(
                        f"Extra closing parentheses: {-self.depth}", token
                    )
                return self._finalize(node, token)

            else:
                raise ParseError(f"Unexpected token '{token.value}'", token)

    def _handle_binary_op(self, node: _PendingNode, token: Token) -> _PendingNode:
        """Apply an and/or token to the pending node.

        With a single operand read so far the pending node takes the operator.
        With both slots filled, the built node becomes the left operand of a
        new pending node, so operators chain left to right.
        """
        name = token.type.name
        if node.left is None:
            raise ParseError(f"No left operand for {name}", token)

        if node.op is None:
            node.op = token.type
            return node

        if node.right is None:
            raise ParseError(
                f"Unexpected {name} after {node.op.name}: missing operand", token
            )

        return _PendingNode(op=token.type, left=node.build())

    def _parse_not(self, token: Token) -> Not:
        """Parse the operand following a NOT token."""
        next_token = self._scan_ignore_whitespace()

        if next_token.type in (TokenType.TAG, TokenType.FIELD_PATH):
            self._unscan()
            return Not(Unit(self._parse_tag_reference()))

        if next_token.type == TokenType.LPAREN:
            return Not(self._parse_group(next_token))

        raise ParseError(
            f"Unexpected token '{next_token.value or next_token.type.name}' after NOT",
            next_token,
        )

    def _parse_group(self, token: Token) -> ASTNode:
        """Parse the expression inside parentheses."""
        level = self.depth
        self.depth += 1
        node = self._parse()
        if self.depth != level:
            raise ParseError(
                "Unexpected '(': missing closing parenthesis at end of input", token
            )
        return node

    def _parse_tag_reference(self) -> TagReference:
        """Parse one literal: a tag name and an optional field path scope."""
        name = ""
        field_path = ""

        while True:
            token = self._scan_ignore_whitespace()

            if token.type == TokenType.TAG:
                if name:
                    raise ParseError(
                        f"Unexpected tag '{token.value}' conflicting with '{name}'",
                        token,
                    )
                name = token.value

            elif token.type == TokenType.FIELD_PATH:
                if field_path:
                    raise ParseError(
                        f"Unexpected field path '{token.value}' "
                        f"conflicting with '{field_path}'",
                        token,
                    )
                if not name:
                    raise ParseError(
                        f"Field path '{token.value}' without a tag", token
                    )
                field_path = token.value

            else:
                self._unscan()
                break

        if name not in self.tags:
            self.tags.append(name)
        if field_path and field_path not in self.field_paths:
            self.field_paths.append(field_path)

        return TagReference(name, field_path)

    def _finalize(self, node: _PendingNode, token: Token) -> ASTNode:
        """Turn the pending node into the result of the current production."""
        if node.op is None:
            if node.left is None:
                raise ParseError("Empty expression", token)
            return node.left

        if node.right is None:
            raise ParseError(
                f"Incomplete expression: {node.op.name} is missing its right operand",
                token,
            )
        return node.build()


def parse(source: str, case_sensitive: bool = False) -> ASTNode:
    """Convenience function to parse an expression string.

    Args:
        source: The expression string
        case_sensitive: Only accept lowercase keywords when True

    Returns:
        The AST root node
    """
    return Parser(source, case_sensitive=case_sensitive).parse()
