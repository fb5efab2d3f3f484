from databricks.labs.grantor.resources.base import Field, Resource, ResourceData
from databricks.labs.grantor.resources.stream_grant import StreamGrant
from databricks.labs.grantor.resources.table_grant import TableGrant
from databricks.labs.grantor.resources.tag_grant import TagGrant
from databricks.labs.grantor.resources.view import View
from databricks.labs.grantor.resources.view_grant import ViewGrant

__all__ = ["Field", "Resource", "ResourceData", "StreamGrant", "TableGrant", "TagGrant", "View", "ViewGrant"]
