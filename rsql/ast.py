"""
rsql/ast.py

Syntax tree model for the rsql statement grammar.

The parser builds a tree of generic, tagged Node objects (rather than one class
per statement) so that child order carries the statement structure:

    CreateDatabase  [Identifier]
    CreateTable     [Identifier, ColumnList]
    DropTable       [Identifier]
    Select          [Literal("*") | ColumnList, Identifier, WhereClause?]
    Insert          [Identifier, ColumnList, ValueList, ValueList...]
    ColumnList      [ColumnDef...]  (Identifier... inside SELECT)
    ColumnDef       [Identifier(name), Identifier(type)?]
    WhereClause     [expression]
    ValueList       [expression...]
    Operator(op)    [left operand, right expression]

Ownership:
- A node owns its children exclusively; attaching a node that already has a
  parent raises ValueError, so a node is never reachable from two parents.
- Nodes are created and released through a NodeAllocator, which counts both so
  callers (and tests) can check that everything created was released once.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator


class NodeKind(Enum):
    """Syntax tree node tags. The value is the display name used by format_tree()."""
    CREATE_DATABASE = "CreateDatabase"
    CREATE_TABLE = "CreateTable"
    DROP_TABLE = "DropTable"
    SELECT = "Select"
    INSERT = "Insert"
    IDENTIFIER = "Identifier"
    COLUMN_LIST = "ColumnList"
    COLUMN_DEF = "ColumnDef"
    WHERE_CLAUSE = "WhereClause"
    LITERAL = "Literal"
    OPERATOR = "Operator"
    VALUE_LIST = "ValueList"


STATEMENT_KINDS = frozenset({
    NodeKind.CREATE_DATABASE,
    NodeKind.CREATE_TABLE,
    NodeKind.DROP_TABLE,
    NodeKind.SELECT,
    NodeKind.INSERT,
})

# Kinds whose text is shown by format_tree().
TEXT_KINDS = frozenset({NodeKind.IDENTIFIER, NodeKind.LITERAL, NodeKind.OPERATOR})


@dataclass(eq=False)
class Node:
    """
    A syntax tree node.

    Attributes:
        kind: NodeKind tag.
        text: Payload for Identifier/Literal/Operator nodes, else None.
        children: Ordered owned child nodes.
    """
    kind: NodeKind
    text: str | None = None
    children: list[Node] = field(default_factory=list)
    parent: Node | None = field(default=None, repr=False)
    released: bool = field(default=False, repr=False)

    def __len__(self) -> int:
        return len(self.children)

    def __getitem__(self, index: int) -> Node:
        return self.children[index]

    def add_child(self, child: Node) -> Node:
        """
        Append `child`, taking ownership of it.

        Returns:
            The child, for chaining.

        Raises:
            ValueError: if child already belongs to a parent, is this node
                        itself, or has been released.
        """
        if child is self:
            raise ValueError("a node cannot be its own child")
        if child.parent is not None:
            raise ValueError(f"{child.kind.value} node already has a parent")
        if child.released or self.released:
            raise ValueError("cannot attach a released node")
        child.parent = self
        self.children.append(child)
        return child

    def walk(self) -> Iterator[Node]:
        """Pre-order traversal of this node and all its descendants."""
        yield self
        for c in self.children:
            yield from c.walk()

    def child_of_kind(self, kind: NodeKind) -> Node | None:
        """Return the first direct child with the given kind, if any."""
        for c in self.children:
            if c.kind is kind:
                return c
        return None

    @property
    def is_statement(self) -> bool:
        return self.kind in STATEMENT_KINDS


class NodeAllocator:
    """
    Creates and releases nodes, counting both.

    Attributes:
        created: Number of nodes created so far.
        released: Number of nodes released so far.
    """

    def __init__(self) -> None:
        self.created = 0
        self.released = 0

    @property
    def live(self) -> int:
        """Nodes created but not yet released."""
        return self.created - self.released

    def create(self, kind: NodeKind, text: str | None = None) -> Node:
        """Create a childless node holding its own copy of `text`."""
        self.created += 1
        return Node(kind=kind, text=None if text is None else str(text))

    def release(self, node: Node | None) -> int:
        """
        Recursively release `node` and its children.

        Releasing None or an already released node does nothing. If the node is
        still attached to a parent it is detached first.

        Returns:
            Number of nodes released by this call.
        """
        if node is None or node.released:
            return 0
        if node.parent is not None:
            siblings = node.parent.children
            for i, c in enumerate(siblings):
                if c is node:
                    del siblings[i]
                    break
            node.parent = None
        return self._release_subtree(node)

    def _release_subtree(self, node: Node) -> int:
        count = 1
        for c in node.children:
            c.parent = None
            count += self._release_subtree(c)
        node.children = []
        node.text = None
        node.released = True
        self.released += 1
        return count


def format_tree(node: Node, indent: int = 0) -> str:
    """
    Render a tree as an indented listing, two spaces per level.

    Example:
        CreateTable
          Identifier: users
          ColumnList
            ColumnDef
              Identifier: id
              Identifier: INT
    """
    lines: list[str] = []

    def emit(n: Node, depth: int) -> None:
        label = n.kind.value
        if n.kind in TEXT_KINDS and n.text is not None:
            label = f"{label}: {n.text}"
        lines.append("  " * depth + label)
        for c in n.children:
            emit(c, depth + 1)

    emit(node, indent)
    return "\n".join(lines)
