from collections.abc import Iterable
from dataclasses import dataclass

from databricks.labs.lsql.core import Row

from databricks.labs.grantor.errors import ValidationError
from databricks.labs.grantor.framework.utils import escape_sql_identifier
from databricks.labs.grantor.grants.privileges import ObjectType


@dataclass(frozen=True)
class SpecificObject:
    database: str
    schema: str
    name: str


@dataclass(frozen=True)
class FutureObjects:
    """Objects created later in a schema, or in a whole database when there is no schema."""

    database: str
    schema: str | None = None

    @property
    def scope(self) -> str:
        return "SCHEMA" if self.schema else "DATABASE"


GrantTarget = SpecificObject | FutureObjects


@dataclass(frozen=True)
class GrantRecord:
    role: str
    privilege: str
    grant_option: bool


class GrantBuilder:
    """Renders GRANT, REVOKE and SHOW GRANTS statements for one object type and target."""

    def __init__(self, object_type: ObjectType, target: GrantTarget):
        if isinstance(target, FutureObjects) and not object_type.supports_future:
            raise ValidationError(f"future grants are not supported on {object_type.plural}")
        self._object_type = object_type
        self._target = target

    @classmethod
    def for_target(cls, object_type: ObjectType, database: str, schema: str, name: str) -> "GrantBuilder":
        if name:
            return cls(object_type, SpecificObject(database, schema, name))
        return cls(object_type, FutureObjects(database, schema or None))

    @property
    def object_type(self) -> ObjectType:
        return self._object_type

    @property
    def target(self) -> GrantTarget:
        return self._target

    @property
    def on_future(self) -> bool:
        return isinstance(self._target, FutureObjects)

    def describe(self) -> str:
        """Human-readable target, used in log and error messages."""
        return self._on_clause()

    def show(self) -> str:
        if isinstance(self._target, FutureObjects):
            return f"SHOW FUTURE GRANTS IN {self._target.scope} {_container(self._target)}"
        return f"SHOW GRANTS ON {self._on_clause()}"

    def grant(self, privilege: str, role: str, with_grant_option: bool = False) -> str:
        query = f"GRANT {privilege} ON {self._on_clause()} TO ROLE {escape_sql_identifier(role)}"
        if with_grant_option:
            query += " WITH GRANT OPTION"
        return query

    def revoke(self, privilege: str, role: str) -> str:
        return f"REVOKE {privilege} ON {self._on_clause()} FROM ROLE {escape_sql_identifier(role)}"

    def records(self, rows: Iterable[Row]) -> list[GrantRecord]:
        """
        Converts the rows of `show()` into grant records.

        SHOW GRANTS names its columns `granted_on` / `granted_to`, SHOW FUTURE GRANTS names them `grant_on` /
        `grant_to`. Grants to shares are skipped, and so are future grants on other object types, which
        SHOW FUTURE GRANTS lists for the whole schema or database.
        """
        records = []
        for row in rows:
            raw = row.asDict()
            grantee_type = raw.get("granted_to", raw.get("grant_to"))
            if grantee_type is not None and str(grantee_type).upper() != "ROLE":
                continue
            if self.on_future:
                granted_on = str(raw.get("grant_on", raw.get("granted_on", ""))).upper()
                if granted_on != self._object_type.value:
                    continue
            records.append(
                GrantRecord(
                    role=raw["grantee_name"],
                    privilege=str(raw["privilege"]).upper(),
                    grant_option=_as_bool(raw.get("grant_option", False)),
                )
            )
        return records

    def _on_clause(self) -> str:
        if isinstance(self._target, FutureObjects):
            return f"FUTURE {self._object_type.plural} IN {self._target.scope} {_container(self._target)}"
        name = escape_sql_identifier(self._target.database, self._target.schema, self._target.name)
        return f"{self._object_type.value} {name}"


def _container(target: FutureObjects) -> str:
    return escape_sql_identifier(target.database, target.schema or "")


def _as_bool(value: object) -> bool:
    if isinstance(value, str):
        return value.lower() == "true"
    return bool(value)
