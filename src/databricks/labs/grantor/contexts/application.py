import abc
import sys
from collections.abc import Mapping
from functools import cached_property

from databricks.labs.blueprint.installation import Installation
from databricks.labs.blueprint.wheels import ProductInfo
from databricks.labs.lsql.backends import SqlBackend
from databricks.sdk import WorkspaceClient

from databricks.labs.grantor.config import GrantorConfig
from databricks.labs.grantor.grants.privileges import ObjectType, PrivilegeSet, privilege_table
from databricks.labs.grantor.resources import Resource, StreamGrant, TableGrant, TagGrant, View, ViewGrant

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self


class GlobalContext(abc.ABC):
    def __init__(self, named_parameters: dict[str, str] | None = None):
        if not named_parameters:
            named_parameters = {}
        self._named_parameters = named_parameters

    def replace(self, **kwargs) -> Self:
        """Replace cached properties for unit testing purposes."""
        for key, value in kwargs.items():
            self.__dict__[key] = value
        return self

    @cached_property
    def workspace_client(self) -> WorkspaceClient:
        raise ValueError("Workspace client not set")

    @cached_property
    def sql_backend(self) -> SqlBackend:
        raise ValueError("SQL backend not set")

    @cached_property
    def named_parameters(self) -> dict[str, str]:
        return self._named_parameters

    @cached_property
    def product_info(self) -> ProductInfo:
        return ProductInfo.from_class(GrantorConfig)

    @cached_property
    def installation(self) -> Installation:
        return Installation.current(self.workspace_client, self.product_info.product_name())

    @cached_property
    def config(self) -> GrantorConfig:
        return self.installation.load(GrantorConfig)

    @cached_property
    def privileges(self) -> Mapping[ObjectType, PrivilegeSet]:
        return privilege_table(self.config.extra_privileges)

    @cached_property
    def stream_grant(self) -> StreamGrant:
        return StreamGrant(
            self.sql_backend, self.privileges, enable_multiple_grants=self.config.enable_multiple_grants
        )

    @cached_property
    def view_grant(self) -> ViewGrant:
        return ViewGrant(self.sql_backend, self.privileges, enable_multiple_grants=self.config.enable_multiple_grants)

    @cached_property
    def table_grant(self) -> TableGrant:
        return TableGrant(
            self.sql_backend, self.privileges, enable_multiple_grants=self.config.enable_multiple_grants
        )

    @cached_property
    def tag_grant(self) -> TagGrant:
        return TagGrant(self.sql_backend, self.privileges, enable_multiple_grants=self.config.enable_multiple_grants)

    @cached_property
    def view(self) -> View:
        return View(self.sql_backend)

    @cached_property
    def resources(self) -> dict[str, Resource]:
        return {
            "stream_grant": self.stream_grant,
            "view_grant": self.view_grant,
            "table_grant": self.table_grant,
            "tag_grant": self.tag_grant,
            "view": self.view,
        }

    def resource(self, resource_type: str) -> Resource:
        try:
            return self.resources[resource_type]
        except KeyError:
            known = ", ".join(sorted(self.resources))
            raise ValueError(f"unknown resource type {resource_type}, expected one of: {known}") from None
