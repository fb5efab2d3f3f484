import json

from databricks.labs.blueprint.cli import App
from databricks.labs.blueprint.entrypoint import get_logger
from databricks.sdk import WorkspaceClient

from databricks.labs.grantor.contexts.workspace_cli import WorkspaceContext
from databricks.labs.grantor.framework.utils import split_string_to_set
from databricks.labs.grantor.grants.identifiers import GrantIdentifier, decode

grantor = App(__file__)
logger = get_logger(__file__)


def _json_default(value):
    if isinstance(value, frozenset):
        return sorted(value)
    raise TypeError(f"not serializable: {type(value).__name__}")


@grantor.command
def import_resource(w: WorkspaceClient, resource_type: str, resource_id: str):
    """Read an existing resource from the warehouse by its id and print its state"""
    ctx = WorkspaceContext(w)
    resource = ctx.resource(resource_type)
    d = resource.import_state(resource_id)
    state = d.state()
    if not state:
        logger.warning(f"{resource_type} {resource_id} does not exist")
        return
    print(json.dumps(state, default=_json_default))


@grantor.command
def grant_id(
    database_name: str,
    privilege: str,
    roles: str,
    schema_name: str = "",
    object_name: str = "",
    with_grant_option: str = "false",
):
    """Print the id of a grant, in the format accepted by import-resource"""
    identifier = GrantIdentifier(
        database_name=database_name,
        schema_name=schema_name,
        object_name=object_name,
        privilege=privilege.upper(),
        with_grant_option=with_grant_option.lower() == "true",
        roles=split_string_to_set(roles),
    )
    print(str(identifier))


@grantor.command
def describe_grant_id(resource_id: str):
    """Decode a grant id, including ids written by earlier releases"""
    identifier = decode(resource_id)
    print(
        json.dumps(
            {
                "database_name": identifier.database_name,
                "schema_name": identifier.schema_name,
                "object_name": identifier.object_name,
                "on_future": identifier.on_future,
                "privilege": identifier.privilege,
                "with_grant_option": identifier.with_grant_option,
                "roles": sorted(identifier.roles),
            }
        )
    )


if __name__ == "__main__":
    grantor()
