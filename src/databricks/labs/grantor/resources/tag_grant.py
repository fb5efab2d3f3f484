from databricks.labs.grantor.grants.privileges import PRIVILEGE_APPLY, ObjectType
from databricks.labs.grantor.resources.grants import GrantResource


class TagGrant(GrantResource):
    """Tags have no future grants: tag_name and schema_name are always required."""

    object_type = ObjectType.TAG
    object_field = "tag_name"
    default_privilege = PRIVILEGE_APPLY
