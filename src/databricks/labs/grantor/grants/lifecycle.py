import logging
from collections.abc import Iterable

from databricks.labs.lsql.backends import SqlBackend
from databricks.sdk.errors import DatabricksError, NotFound

from databricks.labs.grantor.errors import DriverError
from databricks.labs.grantor.grants.builders import GrantBuilder
from databricks.labs.grantor.grants.identifiers import GrantIdentifier

logger = logging.getLogger(__name__)


def role_diff(previous: Iterable[str], desired: Iterable[str]) -> tuple[set[str], set[str]]:
    """Returns the roles to grant and the roles to revoke to go from `previous` to `desired`."""
    previous_roles = set(previous)
    desired_roles = set(desired)
    return desired_roles - previous_roles, previous_roles - desired_roles


class GenericGrant:
    """
    Create, read, update and delete of a single privilege on one grant target, shared by all grant resources.

    Every operation runs its statements one after another on the backend and stops at the first failure. Nothing
    is rolled back: roles granted or revoked before the failure stay that way until the next read reconciles them.
    """

    def __init__(self, backend: SqlBackend):
        self._backend = backend

    def create(self, grant_id: GrantIdentifier, builder: GrantBuilder) -> None:
        self.grant_roles(builder, grant_id.privilege, grant_id.with_grant_option, sorted(grant_id.roles))

    def read(
        self,
        grant_id: GrantIdentifier,
        builder: GrantBuilder,
        declared_roles: Iterable[str] = (),
        enable_multiple_grants: bool = False,
    ) -> set[str] | None:
        """
        Fetches the roles currently holding the privilege of `grant_id` on the builder's target.

        Args:
            grant_id (GrantIdentifier): The decoded resource identity.
            builder (GrantBuilder): Statement builder for the identity's target.
            declared_roles (Iterable[str]): Roles this resource manages.
            enable_multiple_grants (bool): When set, roles holding the privilege that this resource does not
                manage are left out, so they are not reported as drift.

        Returns:
            set[str] | None: The roles with a matching privilege and grant option, or None when the target
            no longer exists.
        """
        query = builder.show()
        try:
            rows = list(self._backend.fetch(query))
        except NotFound as e:
            logger.warning(f"Grant target {builder.describe()} no longer exists: {e}")
            return None
        # SHOW FUTURE GRANTS also lists other object types, which records() drops
        records = builder.records(rows)
        if not records:
            logger.warning(f"No grants found on {builder.describe()}, treating it as absent")
            return None
        privilege = grant_id.privilege.upper()
        roles = set()
        for record in records:
            if record.privilege != privilege:
                continue
            if record.grant_option != grant_id.with_grant_option:
                continue
            roles.add(record.role)
        if enable_multiple_grants:
            roles &= set(declared_roles)
        return roles

    def update(
        self,
        grant_id: GrantIdentifier,
        builder: GrantBuilder,
        previous: Iterable[str],
        desired: Iterable[str],
    ) -> None:
        to_add, to_revoke = role_diff(previous, desired)
        if not to_add and not to_revoke:
            logger.debug(f"Roles on {builder.describe()} are up to date")
            return
        self.revoke_roles(builder, grant_id.privilege, sorted(to_revoke))
        self.grant_roles(builder, grant_id.privilege, grant_id.with_grant_option, sorted(to_add))

    def delete(self, grant_id: GrantIdentifier, builder: GrantBuilder, roles: Iterable[str]) -> None:
        try:
            self.revoke_roles(builder, grant_id.privilege, sorted(roles))
        except DriverError as e:
            if not isinstance(e.cause, NotFound):
                raise
            logger.warning(f"Grant target {builder.describe()} is already gone: {e.cause}")

    def grant_roles(self, builder: GrantBuilder, privilege: str, with_grant_option: bool, roles: list[str]) -> None:
        for role in roles:
            logger.info(f"Granting {privilege} on {builder.describe()} to role {role}")
            self._execute(builder.grant(privilege, role, with_grant_option), f"granting {privilege}", builder, role)

    def revoke_roles(self, builder: GrantBuilder, privilege: str, roles: list[str]) -> None:
        for role in roles:
            logger.info(f"Revoking {privilege} on {builder.describe()} from role {role}")
            self._execute(builder.revoke(privilege, role), f"revoking {privilege}", builder, role)

    def _execute(self, query: str, action: str, builder: GrantBuilder, role: str) -> None:
        logger.debug(f"Executing: {query}")
        try:
            self._backend.execute(query)
        except DatabricksError as e:
            raise DriverError(f"error {action} on {builder.describe()} for role {role}", e) from e
