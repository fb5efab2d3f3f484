from databricks.labs.grantor.grants.privileges import ObjectType
from databricks.labs.grantor.resources.grants import GrantResource


class ViewGrant(GrantResource):
    object_type = ObjectType.VIEW
    object_field = "view_name"
