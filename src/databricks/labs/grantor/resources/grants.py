import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import ClassVar

from databricks.labs.lsql.backends import SqlBackend

from databricks.labs.grantor.errors import ValidationError
from databricks.labs.grantor.grants.builders import GrantBuilder
from databricks.labs.grantor.grants.identifiers import DELIMITER, GrantIdentifier, decode
from databricks.labs.grantor.grants.lifecycle import GenericGrant
from databricks.labs.grantor.grants.privileges import DEFAULT_PRIVILEGES, ObjectType, PrivilegeSet
from databricks.labs.grantor.resources.base import Field, Resource, ResourceData, Schema

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GrantState:
    database_name: str
    schema_name: str
    object_name: str
    privilege: str
    roles: frozenset[str]
    on_future: bool = False
    with_grant_option: bool = False
    enable_multiple_grants: bool = False

    def identifier(self) -> GrantIdentifier:
        return GrantIdentifier(
            database_name=self.database_name,
            schema_name=self.schema_name,
            object_name=self.object_name,
            privilege=self.privilege,
            with_grant_option=self.with_grant_option,
            roles=self.roles,
        )


class GrantResource(Resource):
    """
    Grant of one privilege on an object, or on future objects of its type in a schema or database, to a set of
    roles. Only the roles can change once the grant exists.
    """

    object_type: ClassVar[ObjectType]
    object_field: ClassVar[str]
    default_privilege: ClassVar[str] = "SELECT"

    def __init__(
        self,
        backend: SqlBackend,
        privileges: Mapping[ObjectType, PrivilegeSet] = DEFAULT_PRIVILEGES,
        *,
        enable_multiple_grants: bool = False,
    ):
        super().__init__(backend)
        self._privileges = privileges[self.object_type]
        self._enable_multiple_grants = enable_multiple_grants
        self._grants = GenericGrant(backend)
        self.schema = self._build_schema()

    @property
    def privileges(self) -> PrivilegeSet:
        return self._privileges

    def _build_schema(self) -> Schema:
        noun = self.object_type.value.lower()
        scope = f"current or future {noun}s" if self.object_type.supports_future else f"{noun}s"
        schema = {
            "database_name": Field(
                str,
                required=True,
                force_new=True,
                description=f"The name of the database containing the {scope} on which to grant privileges.",
            ),
            "schema_name": Field(
                str,
                force_new=True,
                description=f"The name of the schema containing the {scope} on which to grant privileges.",
            ),
            self.object_field: Field(
                str,
                force_new=True,
                description=f"The name of the {noun} on which to grant privileges immediately.",
            ),
            "privilege": Field(
                str,
                default=self.default_privilege,
                force_new=True,
                allowed=tuple(self._privileges.to_list()),
                description=f"The privilege to grant on the {noun}.",
            ),
            "roles": Field(frozenset, required=True, description="Grants privilege to these roles."),
            "with_grant_option": Field(
                bool,
                default=False,
                force_new=True,
                description="When this is set to true, allows the recipient role to grant the privileges to "
                "other roles.",
            ),
            "enable_multiple_grants": Field(
                bool,
                default=self._enable_multiple_grants,
                force_new=True,
                description="When this is set to true, multiple grants of the same type can be created. Grants "
                "applied to roles outside this resource are then left untouched.",
            ),
        }
        if self.object_type.supports_future:
            schema["on_future"] = Field(
                bool,
                default=False,
                force_new=True,
                description=f"When this is set to true, apply this grant on all future {noun}s in the given "
                f"schema, or in the given database when no schema_name is provided. The {self.object_field} "
                "field must be unset in order to use on_future.",
            )
        return schema

    def state_of(self, d: ResourceData) -> GrantState:
        on_future = d.get("on_future") if "on_future" in self.schema else False
        return GrantState(
            database_name=d.get("database_name"),
            schema_name=d.get("schema_name"),
            object_name=d.get(self.object_field),
            privilege=d.get("privilege"),
            roles=d.get("roles"),
            on_future=on_future,
            with_grant_option=d.get("with_grant_option"),
            enable_multiple_grants=d.get("enable_multiple_grants"),
        )

    def validate(self, state: GrantState) -> None:
        if not state.object_name and not state.on_future:
            raise ValidationError(f"{self.object_field} must be set unless on_future is true")
        if state.object_name and state.on_future:
            raise ValidationError(f"{self.object_field} must be empty if on_future is true")
        if not state.schema_name and not state.on_future:
            raise ValidationError("schema_name must be set unless on_future is true")
        if not state.roles:
            raise ValidationError("roles must contain at least one role")
        _check_role_names(state.roles)
        if state.privilege not in self._privileges:
            allowed = ", ".join(self._privileges.to_list())
            raise ValidationError(f"privilege {state.privilege} is not valid on {self.object_type.value}: {allowed}")

    def builder(self, grant_id: GrantIdentifier) -> GrantBuilder:
        return GrantBuilder.for_target(
            self.object_type, grant_id.database_name, grant_id.schema_name, grant_id.object_name
        )

    def create(self, d: ResourceData) -> None:
        state = self.state_of(d)
        self.validate(state)
        grant_id = state.identifier()
        self._grants.create(grant_id, self.builder(grant_id))
        d.set_id(str(grant_id))
        self.read(d)

    def read(self, d: ResourceData) -> None:
        grant_id = decode(d.id)
        d.set("database_name", grant_id.database_name)
        d.set("schema_name", grant_id.schema_name)
        d.set(self.object_field, grant_id.object_name)
        if "on_future" in self.schema:
            d.set("on_future", grant_id.on_future)
        d.set("privilege", grant_id.privilege)
        d.set("with_grant_option", grant_id.with_grant_option)
        roles = self._grants.read(
            grant_id,
            self.builder(grant_id),
            declared_roles=d.get("roles"),
            enable_multiple_grants=d.get("enable_multiple_grants"),
        )
        if roles is None:
            logger.warning(f"{self.object_type.value} grant {d.id} not found, removing from state")
            d.set_id("")
            return
        d.set("roles", roles)

    def update(self, d: ResourceData) -> None:
        # roles are the only field that can change in place
        self.check_in_place(d)
        if not d.has_change("roles"):
            return
        previous, desired = d.get_change("roles")
        _check_role_names(desired)
        grant_id = decode(d.id)
        self._grants.update(grant_id, self.builder(grant_id), previous, desired)
        d.set_id(str(grant_id.with_roles(desired)))
        self.read(d)

    def delete(self, d: ResourceData) -> None:
        grant_id = decode(d.id)
        # ids written by earlier releases do not carry the roles
        roles = grant_id.roles or d.get("roles")
        self._grants.delete(grant_id, self.builder(grant_id), roles)
        d.set_id("")


def _check_role_names(roles: Iterable[str]) -> None:
    # the id stores roles as one comma-separated segment
    invalid = sorted(role for role in roles if "," in role or DELIMITER in role)
    if invalid:
        raise ValidationError(f"role names must not contain ',' or '{DELIMITER}': {', '.join(invalid)}")
