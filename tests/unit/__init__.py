import logging
from unittest.mock import create_autospec

from databricks.labs.lsql.backends import MockBackend
from databricks.sdk import WorkspaceClient

logging.getLogger("tests").setLevel("DEBUG")

SHOW_GRANTS = MockBackend.rows(
    "created_on",
    "privilege",
    "granted_on",
    "name",
    "granted_to",
    "grantee_name",
    "grant_option",
    "granted_by",
)

SHOW_FUTURE_GRANTS = MockBackend.rows(
    "created_on",
    "privilege",
    "grant_on",
    "name",
    "grant_to",
    "grantee_name",
    "grant_option",
)

SHOW_VIEWS = MockBackend.rows(
    "created_on",
    "name",
    "reserved",
    "database_name",
    "schema_name",
    "owner",
    "comment",
    "text",
    "is_secure",
    "is_materialized",
)


def mock_workspace_client() -> WorkspaceClient:
    ws = create_autospec(WorkspaceClient)
    ws.config.host = "https://localhost"
    return ws
