from databricks.labs.grantor.grants.privileges import ObjectType
from databricks.labs.grantor.resources.grants import GrantResource


class TableGrant(GrantResource):
    object_type = ObjectType.TABLE
    object_field = "table_name"
