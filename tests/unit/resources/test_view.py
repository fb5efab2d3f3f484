import pytest
from databricks.labs.lsql.backends import MockBackend

from databricks.labs.grantor.errors import DriverError, MalformedIdentifier, ValidationError
from databricks.labs.grantor.resources import View
from databricks.labs.grantor.views import ViewBuilder

from .. import SHOW_VIEWS

STATEMENT = "SELECT * FROM test_db.PUBLIC.GREAT_TABLE WHERE account_id = 'bobs-account-id'"

VIEW_ROWS = {
    "SHOW VIEWS LIKE": SHOW_VIEWS[
        (
            "2019-05-19 16:55:36.530 -0700",
            "good_name",
            "",
            "test_db",
            "test_schema",
            "admin",
            "great comment",
            "SELECT * FROM test_db.GREAT_SCHEMA.GREAT_TABLE WHERE account_id = 'bobs-account-id'",
            True,
            False,
        ),
    ]
}


def _data(resource: View, **kwargs):
    raw = {
        "name": "good_name",
        "database": "test_db",
        "schema": "test_schema",
        "comment": "great comment",
        "statement": STATEMENT,
        "is_secure": True,
        **kwargs,
    }
    return resource.data(raw)


def test_create_secure_view() -> None:
    backend = MockBackend(rows=VIEW_ROWS)
    resource = View(backend)
    d = _data(resource)

    resource.create(d)

    assert backend.queries == [
        'CREATE SECURE VIEW "test_db"."test_schema"."good_name" COMMENT = \'great comment\' AS ' + STATEMENT,
        "SHOW VIEWS LIKE 'good_name' IN SCHEMA \"test_db\".\"test_schema\"",
    ]
    assert d.id == "test_db|test_schema|good_name"
    assert d.get("is_secure")


def test_create_or_replace_view() -> None:
    backend = MockBackend(rows=VIEW_ROWS)
    resource = View(backend)
    d = _data(resource, or_replace=True)

    resource.create(d)

    assert backend.queries[0].startswith('CREATE OR REPLACE SECURE VIEW "test_db"."test_schema"."good_name"')


def test_create_keeps_like_wildcards_in_statement() -> None:
    backend = MockBackend(rows=VIEW_ROWS)
    resource = View(backend)
    d = _data(resource, statement="SELECT * FROM t WHERE account_id LIKE 'bob%'")

    resource.create(d)

    assert backend.queries[0].endswith("AS SELECT * FROM t WHERE account_id LIKE 'bob%'")


def test_create_failure() -> None:
    backend = MockBackend(fails_on_first={"CREATE": "Insufficient privileges"})
    resource = View(backend)
    d = _data(resource)
    with pytest.raises(DriverError, match="error creating view good_name"):
        resource.create(d)
    assert not d.id


def test_read_view() -> None:
    backend = MockBackend(rows=VIEW_ROWS)
    resource = View(backend)
    d = resource.data({"name": "x", "database": "x", "schema": "x", "statement": "x"})
    d.set_id("test_db|test_schema|good_name")

    resource.read(d)

    assert d.get("name") == "good_name"
    assert d.get("comment") == "great comment"
    assert d.get("statement") == "SELECT * FROM test_db.GREAT_SCHEMA.GREAT_TABLE WHERE account_id = 'bobs-account-id'"


def test_read_missing_view_clears_state() -> None:
    query = ViewBuilder("good_name").with_database("test_db").with_schema("test_schema").show()
    backend = MockBackend(fails_on_first={query: "TABLE_OR_VIEW_NOT_FOUND"})
    resource = View(backend)
    d = _data(resource)
    d.set_id("test_db|test_schema|good_name")
    assert d.state()

    resource.read(d)

    assert d.state() == {}


def test_read_malformed_id() -> None:
    resource = View(MockBackend())
    d = _data(resource)
    d.set_id("test_db|good_name")
    with pytest.raises(MalformedIdentifier):
        resource.read(d)


def test_update_renames_and_changes_comment() -> None:
    backend = MockBackend(rows=VIEW_ROWS)
    resource = View(backend)
    prior = {"name": "old_name", "database": "test_db", "schema": "test_schema", "statement": STATEMENT}
    d = resource.data({**prior, "name": "good_name", "comment": "great comment"}, prior=prior)
    d.set_id("test_db|test_schema|old_name")

    resource.update(d)

    assert backend.queries == [
        'ALTER VIEW "test_db"."test_schema"."old_name" RENAME TO "test_db"."test_schema"."good_name"',
        'ALTER VIEW "test_db"."test_schema"."good_name" SET COMMENT = \'great comment\'',
        "SHOW VIEWS LIKE 'good_name' IN SCHEMA \"test_db\".\"test_schema\"",
    ]
    assert d.id == "test_db|test_schema|good_name"


def test_update_unsets_comment_and_secure() -> None:
    backend = MockBackend(rows=VIEW_ROWS)
    resource = View(backend)
    current = {"name": "good_name", "database": "test_db", "schema": "test_schema", "statement": STATEMENT}
    d = resource.data(current, prior={**current, "comment": "old", "is_secure": True})
    d.set_id("test_db|test_schema|good_name")

    resource.update(d)

    assert backend.queries[:2] == [
        'ALTER VIEW "test_db"."test_schema"."good_name" UNSET COMMENT',
        'ALTER VIEW "test_db"."test_schema"."good_name" UNSET SECURE',
    ]


def test_delete_view() -> None:
    backend = MockBackend()
    resource = View(backend)
    d = _data(resource)
    d.set_id("test_db|test_schema|good_name")

    resource.delete(d)

    assert backend.queries == ['DROP VIEW "test_db"."test_schema"."good_name"']
    assert not d.id


def test_delete_missing_view_succeeds() -> None:
    backend = MockBackend(fails_on_first={"DROP VIEW": "TABLE_OR_VIEW_NOT_FOUND"})
    resource = View(backend)
    d = _data(resource)
    d.set_id("test_db|test_schema|good_name")

    resource.delete(d)

    assert not d.id


def test_update_of_statement_is_rejected() -> None:
    backend = MockBackend(rows=VIEW_ROWS)
    resource = View(backend)
    prior = {"name": "good_name", "database": "test_db", "schema": "test_schema", "statement": "select 1"}
    d = resource.data({**prior, "statement": "select 2"}, prior=prior)
    d.set_id("test_db|test_schema|good_name")

    with pytest.raises(ValidationError, match="cannot update statement in place"):
        resource.update(d)

    assert not backend.queries


def test_statement_formatting_is_not_a_change() -> None:
    backend = MockBackend(rows=VIEW_ROWS)
    resource = View(backend)
    prior = {"name": "good_name", "database": "test_db", "schema": "test_schema", "statement": "select 1"}
    d = resource.data({**prior, "statement": "SELECT 1;"}, prior=prior)
    d.set_id("test_db|test_schema|good_name")
    assert not d.has_change("statement")

    resource.update(d)

    assert backend.queries == ["SHOW VIEWS LIKE 'good_name' IN SCHEMA \"test_db\".\"test_schema\""]


def test_read_picks_exact_view_name() -> None:
    backend = MockBackend(
        rows={
            "SHOW VIEWS LIKE": SHOW_VIEWS[
                ("2019-05-19", "myXview", "", "D", "S", "admin", "other", "SELECT 2", False, False),
                ("2019-05-19", "my_view", "", "D", "S", "admin", "mine", "SELECT 1", False, False),
            ]
        }
    )
    resource = View(backend)
    d = resource.data({"name": "my_view", "database": "D", "schema": "S", "statement": "x"})
    d.set_id("D|S|my_view")

    resource.read(d)

    assert d.get("comment") == "mine"
    assert d.get("statement") == "SELECT 1"


def test_read_with_only_wildcard_matches_clears_state() -> None:
    backend = MockBackend(
        rows={
            "SHOW VIEWS LIKE": SHOW_VIEWS[
                ("2019-05-19", "myXview", "", "D", "S", "admin", "other", "SELECT 2", False, False),
            ]
        }
    )
    resource = View(backend)
    d = resource.data({"name": "my_view", "database": "D", "schema": "S", "statement": "x"})
    d.set_id("D|S|my_view")

    resource.read(d)

    assert d.state() == {}
