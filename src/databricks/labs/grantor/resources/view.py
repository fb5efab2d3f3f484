import logging

from databricks.sdk.errors import DatabricksError, NotFound

from databricks.labs.grantor.errors import DriverError, MalformedIdentifier
from databricks.labs.grantor.resources.base import Field, Resource, ResourceData
from databricks.labs.grantor.views import ViewBuilder, diff_suppress_statement, extract_select_statement

logger = logging.getLogger(__name__)

VIEW_SCHEMA = {
    "name": Field(
        str,
        required=True,
        description="Specifies the identifier for the view; must be unique for the schema in which the view "
        "is created.",
    ),
    "database": Field(str, required=True, force_new=True, description="The database in which to create the view."),
    "schema": Field(str, required=True, force_new=True, description="The schema in which to create the view."),
    "statement": Field(
        str,
        required=True,
        force_new=True,
        description="Specifies the query used to create the view.",
        diff_suppress=diff_suppress_statement,
    ),
    "comment": Field(str, description="Specifies a comment for the view."),
    "is_secure": Field(bool, default=False, description="Specifies that the view is secure."),
    "or_replace": Field(bool, default=False, description="Overwrites the view if it exists."),
}


def view_id(database: str, schema: str, name: str) -> str:
    return "|".join([database, schema, name])


def parse_view_id(value: str) -> tuple[str, str, str]:
    parts = value.split("|")
    if len(parts) != 3:
        raise MalformedIdentifier(f"unexpected number of view ID parts ({len(parts)}), expected 3", len(parts))
    database, schema, name = parts
    return database, schema, name


class View(Resource):
    schema = VIEW_SCHEMA

    def create(self, d: ResourceData) -> None:
        database = d.get("database")
        schema = d.get("schema")
        name = d.get("name")
        builder = (
            ViewBuilder(name, database, schema)
            .with_statement(d.get("statement"))
            .with_comment(d.get("comment"))
            .with_secure(d.get("is_secure"))
            .with_replace(d.get("or_replace"))
        )
        self._execute(builder.create(), f"error creating view {name}")
        d.set_id(view_id(database, schema, name))
        self.read(d)

    def read(self, d: ResourceData) -> None:
        database, schema, name = parse_view_id(d.id)
        query = ViewBuilder(name, database, schema).show()
        try:
            rows = list(self._backend.fetch(query))
        except NotFound as e:
            logger.warning(f"View {d.id} not found, removing from state: {e}")
            d.set_id("")
            return
        # LIKE treats _ and % as wildcards
        matching = [raw for raw in (row.asDict() for row in rows) if raw.get("name") == name]
        if not matching:
            logger.warning(f"View {d.id} not found, removing from state")
            d.set_id("")
            return
        row = matching[0]
        d.set("name", row["name"])
        d.set("database", row["database_name"])
        d.set("schema", row["schema_name"])
        d.set("comment", row.get("comment") or "")
        d.set("is_secure", str(row.get("is_secure", "false")).lower() == "true")
        d.set("statement", extract_select_statement(row.get("text") or ""))

    def update(self, d: ResourceData) -> None:
        self.check_in_place(d)
        database, schema, name = parse_view_id(d.id)
        builder = ViewBuilder(name, database, schema)
        if d.has_change("name"):
            _, new_name = d.get_change("name")
            self._execute(builder.rename(new_name), f"error renaming view {name} to {new_name}")
            d.set_id(view_id(database, schema, new_name))
            builder = ViewBuilder(new_name, database, schema)
        if d.has_change("comment"):
            _, comment = d.get_change("comment")
            if comment:
                self._execute(builder.change_comment(comment), f"error updating comment on view {d.id}")
            else:
                self._execute(builder.remove_comment(), f"error removing comment on view {d.id}")
        if d.has_change("is_secure"):
            _, secure = d.get_change("is_secure")
            if secure:
                self._execute(builder.secure(), f"error setting secure for view {d.id}")
            else:
                self._execute(builder.unsecure(), f"error unsetting secure for view {d.id}")
        self.read(d)

    def delete(self, d: ResourceData) -> None:
        database, schema, name = parse_view_id(d.id)
        try:
            self._execute(ViewBuilder(name, database, schema).drop(), f"error deleting view {d.id}")
        except DriverError as e:
            if not isinstance(e.cause, NotFound):
                raise
            logger.warning(f"View {d.id} is already gone: {e.cause}")
        d.set_id("")

    def _execute(self, query: str, message: str) -> None:
        logger.debug(f"Executing: {query}")
        try:
            self._backend.execute(query)
        except DatabricksError as e:
            raise DriverError(message, e) from e
