import pytest

from rsql import CommandOk, Context, ExecutionError, QueryResult, Session, SqlSyntaxError
from rsql.context import MAX_DATABASES, MAX_NAME_LENGTH
from rsql.evaluator import compare
from rsql.session import split_statements


@pytest.fixture
def session():
    s = Session()
    s.execute("CREATE DATABASE shop;")
    s.execute("CREATE TABLE users (id INT, name VARCHAR, age INT);")
    return s


def test_create_database_makes_it_current():
    s = Session()
    res = s.execute("CREATE DATABASE shop;")
    assert isinstance(res, CommandOk)
    assert s.context.current == "shop"
    assert list(s.context.databases) == ["shop"]


def test_table_statement_needs_a_database():
    with pytest.raises(ExecutionError):
        Session().execute("CREATE TABLE t (a INT);")


def test_create_table_records_columns(session):
    table = session.context.current_database().get_table("users")
    assert [(c.name, c.type) for c in table.columns] == [
        ("id", "INT"),
        ("name", "VARCHAR"),
        ("age", "INT"),
    ]


def test_duplicate_column_rolls_back_table(session):
    with pytest.raises(ExecutionError):
        session.execute("CREATE TABLE dup (a INT, a INT);")
    assert "dup" not in session.context.current_database().tables


def test_duplicate_table(session):
    with pytest.raises(ExecutionError):
        session.execute("CREATE TABLE users (x);")


def test_drop_table(session):
    session.execute("DROP TABLE users;")
    assert session.context.current_database().tables == {}
    with pytest.raises(ExecutionError):
        session.execute("DROP TABLE users;")


def test_bulk_insert_and_select_star(session):
    res = session.execute("INSERT INTO users (id, name, age) VALUES (1, 'ada', 36), (2, 'bob', 17);")
    assert res.rows_affected == 2

    res = session.execute("SELECT * FROM users;")
    assert isinstance(res, QueryResult)
    assert res.columns == ["id", "name", "age"]
    assert res.rows == [["1", "ada", "36"], ["2", "bob", "17"]]


def test_insert_subset_of_columns_leaves_null(session):
    session.execute("INSERT INTO users (name) VALUES ('eve');")
    res = session.execute("SELECT id, name FROM users;")
    assert res.rows == [[None, "eve"]]


def test_select_where_numeric_and_text(session):
    session.execute("INSERT INTO users (id, name, age) VALUES (1, 'ada', 36), (2, 'bob', 9), (3, 'cy', 17);")

    res = session.execute("SELECT name FROM users WHERE age >= 17;")
    assert res.rows == [["ada"], ["cy"]]

    res = session.execute("SELECT id FROM users WHERE name = 'bob';")
    assert res.rows == [["2"]]

    res = session.execute("SELECT id FROM users WHERE name != 'bob';")
    assert res.rows == [["1"], ["3"]]


@pytest.mark.parametrize(
    "sql",
    [
        "INSERT INTO users (id, name) VALUES (1);",
        "INSERT INTO users (nope) VALUES (1);",
        "INSERT INTO users (id) VALUES (other);",
        "INSERT INTO ghosts (id) VALUES (1);",
        "SELECT nope FROM users;",
        "SELECT * FROM users WHERE nope = 1;",
        "SELECT * FROM users WHERE id;",
        "SELECT * FROM users WHERE id = age = 3;",
        "SELECT * FROM users WHERE 1 = id;",
    ],
)
def test_execution_errors(session, sql):
    with pytest.raises(ExecutionError):
        session.execute(sql)


def test_insert_rejects_repeated_column(session):
    with pytest.raises(ExecutionError, match="Duplicate column: id"):
        session.execute("INSERT INTO users (id, id) VALUES (1, 2);")
    assert session.context.current_database().get_table("users").rows == []


def test_execute_rejects_several_statements():
    s = Session()
    with pytest.raises(ExecutionError):
        s.execute("CREATE DATABASE a; CREATE DATABASE b;")
    assert s.context.databases == {}


def test_execute_accepts_one_statement_with_trailing_blanks():
    s = Session()
    s.execute("CREATE DATABASE a;  \n ")
    assert list(s.context.databases) == ["a"]


def test_failed_bulk_insert_inserts_nothing(session):
    with pytest.raises(ExecutionError):
        session.execute("INSERT INTO users (id, name) VALUES (1, 'a'), (2);")
    assert session.context.current_database().get_table("users").rows == []


def test_syntax_error_propagates(session):
    with pytest.raises(SqlSyntaxError) as exc:
        session.execute("SELECT id FROM;")
    assert str(exc.value) == "Parse error: Expected IDENTIFIER at token ';'"


def test_execute_script():
    s = Session()
    results = s.execute_script(
        "CREATE DATABASE d; CREATE TABLE t (a INT);\n"
        "INSERT INTO t (a) VALUES (1), (2);\n"
        "SELECT * FROM t WHERE a > 1;"
    )
    assert len(results) == 4
    assert results[-1].rows == [["2"]]


def test_execute_script_empty():
    with pytest.raises(ExecutionError):
        Session().execute_script("  ;  ")


def test_split_statements_respects_quotes():
    assert split_statements("INSERT INTO t (a) VALUES ('x;y'); SELECT * FROM t") == [
        "INSERT INTO t (a) VALUES ('x;y');",
        "SELECT * FROM t",
    ]


def test_sessions_do_not_share_state():
    a, b = Session(), Session()
    a.execute("CREATE DATABASE one;")
    assert b.context.databases == {}


def test_shared_context_between_sessions():
    ctx = Context()
    Session(ctx).execute("CREATE DATABASE one;")
    assert Session(ctx).context.current == "one"


def test_context_capacity_and_names():
    ctx = Context()
    for i in range(MAX_DATABASES):
        ctx.create_database(f"db{i}")
    with pytest.raises(ExecutionError):
        ctx.create_database("overflow")

    db = ctx.use("db0")
    t = db.create_table("t" * 100)
    assert len(t.name) == MAX_NAME_LENGTH


def test_context_drop_database_clears_current():
    ctx = Context()
    ctx.create_database("a")
    ctx.drop_database("a")
    assert ctx.current is None
    with pytest.raises(ExecutionError):
        ctx.current_database()


def test_table_column_and_row_operations():
    ctx = Context()
    t = ctx.create_database("d").create_table("t")
    t.add_column("a", "INT")
    row = t.insert_row({"a": "1"})
    t.add_column("b")
    assert row == {"a": "1", "b": None}
    t.drop_column("a")
    assert row == {"b": None}
    t.delete_row(row)
    assert t.rows == []
    with pytest.raises(ExecutionError):
        t.delete_row(row)


@pytest.mark.parametrize(
    "cell, op, literal, expected",
    [
        ("10", ">", "9", True),
        ("10", ">", "9x", False),
        ("abc", "<", "abd", True),
        ("1.0", "=", "1", True),
        (None, "!=", "1", False),
        ("nan", "=", "nan", True),
        ("Infinity", "=", "inf", False),
        ("1_0", "=", "10", False),
        ("1e3", "=", "1000", False),
        (" 5", "=", "5", False),
    ],
)
def test_compare(cell, op, literal, expected):
    assert compare(cell, op, literal) is expected


def test_where_keeps_float_words_as_text(session):
    session.execute("INSERT INTO users (id, name) VALUES (1, 'nan'), (2, 'Infinity');")
    assert session.execute("SELECT id FROM users WHERE name = 'nan';").rows == [["1"]]
    assert session.execute("SELECT id FROM users WHERE name = 'inf';").rows == []
