import logging
import re

import sqlglot
from sqlglot.errors import SqlglotError

from databricks.labs.grantor.framework.utils import escape_sql_identifier, escape_sql_string

logger = logging.getLogger(__name__)

_NAME_PART = r'(?:"(?:[^"]|"")*"|[^\s."(]+)'
_CREATE_VIEW = re.compile(
    r"^\s*create\s+(?:or\s+replace\s+)?(?:secure\s+)?(?:recursive\s+)?view\s+(?:if\s+not\s+exists\s+)?"
    rf"{_NAME_PART}(?:\.{_NAME_PART})*"
    r"(?:\s*\([^)]*\))?"
    r"(?:\s+copy\s+grants)?"
    r"(?:\s+comment\s*=\s*'(?:[^'\\]|\\.|'')*')?"
    r"\s+as\s+",
    re.IGNORECASE | re.DOTALL,
)


class ViewBuilder:
    def __init__(self, name: str, database: str = "", schema: str = ""):
        self._name = name
        self._database = database
        self._schema = schema
        self._comment = ""
        self._statement = ""
        self._secure = False
        self._replace = False

    def with_database(self, database: str) -> "ViewBuilder":
        self._database = database
        return self

    def with_schema(self, schema: str) -> "ViewBuilder":
        self._schema = schema
        return self

    def with_comment(self, comment: str) -> "ViewBuilder":
        self._comment = comment
        return self

    def with_statement(self, statement: str) -> "ViewBuilder":
        self._statement = statement
        return self

    def with_secure(self, secure: bool = True) -> "ViewBuilder":
        self._secure = secure
        return self

    def with_replace(self, replace: bool = True) -> "ViewBuilder":
        self._replace = replace
        return self

    @property
    def qualified_name(self) -> str:
        return escape_sql_identifier(self._database, self._schema, self._name)

    def create(self) -> str:
        query = "CREATE"
        if self._replace:
            query += " OR REPLACE"
        if self._secure:
            query += " SECURE"
        query += f" VIEW {self.qualified_name}"
        if self._comment:
            query += f" COMMENT = {escape_sql_string(self._comment)}"
        return f"{query} AS {self._statement}"

    def show(self) -> str:
        container = escape_sql_identifier(self._database, self._schema)
        return f"SHOW VIEWS LIKE {escape_sql_string(self._name)} IN SCHEMA {container}"

    def rename(self, new_name: str) -> str:
        target = escape_sql_identifier(self._database, self._schema, new_name)
        return f"ALTER VIEW {self.qualified_name} RENAME TO {target}"

    def change_comment(self, comment: str) -> str:
        return f"ALTER VIEW {self.qualified_name} SET COMMENT = {escape_sql_string(comment)}"

    def remove_comment(self) -> str:
        return f"ALTER VIEW {self.qualified_name} UNSET COMMENT"

    def secure(self) -> str:
        return f"ALTER VIEW {self.qualified_name} SET SECURE"

    def unsecure(self) -> str:
        return f"ALTER VIEW {self.qualified_name} UNSET SECURE"

    def drop(self) -> str:
        return f"DROP VIEW {self.qualified_name}"


def extract_select_statement(text: str) -> str:
    """SHOW VIEWS reports the full DDL in `text`; strip everything up to the AS keyword."""
    match = _CREATE_VIEW.match(text)
    if match is None:
        return text
    return text[match.end() :]


def normalize_statement(statement: str) -> str:
    try:
        expressions = sqlglot.parse(statement, read="snowflake")
        rendered = [expression.sql(dialect="snowflake") for expression in expressions if expression is not None]
        return ";".join(rendered).casefold()
    except SqlglotError as e:
        logger.debug(f"Cannot parse view statement, comparing text: {e}")
    return " ".join(statement.strip().rstrip(";").split()).casefold()


def diff_suppress_statement(old: str, new: str) -> bool:
    """True when two view statements differ only in formatting, letter case or a trailing semicolon."""
    return normalize_statement(old) == normalize_statement(new)
