from databricks.labs.grantor.grants.privileges import ObjectType
from databricks.labs.grantor.resources.grants import GrantResource


class StreamGrant(GrantResource):
    object_type = ObjectType.STREAM
    object_field = "stream_name"
