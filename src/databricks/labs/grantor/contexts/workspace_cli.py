from functools import cached_property

from databricks.labs.lsql.backends import SqlBackend, StatementExecutionBackend
from databricks.sdk import WorkspaceClient

from databricks.labs.grantor.contexts.application import GlobalContext


class WorkspaceContext(GlobalContext):
    def __init__(self, ws: WorkspaceClient, named_parameters: dict[str, str] | None = None):
        super().__init__(named_parameters)
        self._ws = ws

    @cached_property
    def workspace_client(self) -> WorkspaceClient:
        return self._ws

    @cached_property
    def sql_backend(self) -> SqlBackend:
        if not self.config.warehouse_id:
            raise ValueError("warehouse_id is not configured")
        return StatementExecutionBackend(self.workspace_client, self.config.warehouse_id)
