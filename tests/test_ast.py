import pytest

from rsql import NodeAllocator, NodeKind, Parser, Tokenizer, format_tree, parse_sql

STATEMENTS = [
    "CREATE DATABASE shop;",
    "CREATE TABLE users (id INT, name VARCHAR);",
    "DROP TABLE users;",
    "SELECT * FROM users;",
    "SELECT id, name FROM users WHERE id != 3;",
    "SELECT * FROM t WHERE a = b < 'x' >= 4.5",
    "INSERT INTO g (a,b) VALUES (1,2),(3,4);",
]

BROKEN = [
    "CREATE TABLE users (id INT, name VARCHAR,);",
    "SELECT id, name FROM users WHERE id !=;",
    "SELECT * FROM t WHERE a = b < ;",
    "INSERT INTO g (a,b) VALUES (1,2),(3,);",
    "INSERT INTO g (a,b) VALUES (1,2) garbage",
    "CREATE TABLE t (a INT) x",
]


@pytest.mark.parametrize("sql", STATEMENTS)
def test_release_frees_every_created_node(sql):
    nodes = NodeAllocator()
    tree = parse_sql(sql, nodes)
    assert nodes.created == sum(1 for _ in tree.walk())
    assert nodes.release(tree) == nodes.created
    assert nodes.released == nodes.created
    assert nodes.live == 0


@pytest.mark.parametrize("sql", BROKEN)
def test_failed_parse_leaks_nothing(sql):
    nodes = NodeAllocator()
    parser = Parser(Tokenizer(sql), nodes)
    assert parser.parse() is None
    assert nodes.created > 0
    assert nodes.live == 0


def test_release_twice_is_noop():
    nodes = NodeAllocator()
    tree = parse_sql("SELECT * FROM users;", nodes)
    assert nodes.release(tree) == 3
    assert nodes.release(tree) == 0
    assert nodes.release(None) == 0
    assert nodes.released == 3


def test_release_leaf_without_text():
    nodes = NodeAllocator()
    leaf = nodes.create(NodeKind.COLUMN_LIST)
    assert nodes.release(leaf) == 1
    assert leaf.released


def test_release_subtree_detaches_from_parent():
    nodes = NodeAllocator()
    tree = parse_sql("CREATE TABLE t (a INT, b INT);", nodes)
    cols = tree[1]
    assert nodes.release(cols) == 7
    assert len(tree) == 1
    assert nodes.release(tree) == 2
    assert nodes.live == 0


def test_node_cannot_have_two_parents():
    nodes = NodeAllocator()
    a = nodes.create(NodeKind.VALUE_LIST)
    b = nodes.create(NodeKind.VALUE_LIST)
    lit = nodes.create(NodeKind.LITERAL, "1")
    a.add_child(lit)
    with pytest.raises(ValueError):
        b.add_child(lit)
    with pytest.raises(ValueError):
        a.add_child(a)


def test_released_node_cannot_be_attached():
    nodes = NodeAllocator()
    parent = nodes.create(NodeKind.VALUE_LIST)
    lit = nodes.create(NodeKind.LITERAL, "1")
    nodes.release(lit)
    with pytest.raises(ValueError):
        parent.add_child(lit)


def test_child_order_is_preserved():
    nodes = NodeAllocator()
    parent = nodes.create(NodeKind.VALUE_LIST)
    for i in range(10):
        parent.add_child(nodes.create(NodeKind.LITERAL, str(i)))
    assert [c.text for c in parent.children] == [str(i) for i in range(10)]


def test_text_is_an_independent_copy():
    sql = "CREATE DATABASE shop;"
    tree = parse_sql(sql)
    del sql
    assert tree[0].text == "shop"


def test_is_statement():
    tree = parse_sql("DROP TABLE t")
    assert tree.is_statement
    assert not tree[0].is_statement


def test_format_tree_create_table():
    tree = parse_sql("CREATE TABLE users (id INT, name VARCHAR);")
    assert format_tree(tree) == "\n".join(
        [
            "CreateTable",
            "  Identifier: users",
            "  ColumnList",
            "    ColumnDef",
            "      Identifier: id",
            "      Identifier: INT",
            "    ColumnDef",
            "      Identifier: name",
            "      Identifier: VARCHAR",
        ]
    )


def test_format_tree_where_and_indent():
    tree = parse_sql("SELECT * FROM t WHERE x < 5;")
    assert format_tree(tree, indent=1) == "\n".join(
        [
            "  Select",
            "    Literal: *",
            "    Identifier: t",
            "    WhereClause",
            "      Operator: <",
            "        Identifier: x",
            "        Literal: 5",
        ]
    )
