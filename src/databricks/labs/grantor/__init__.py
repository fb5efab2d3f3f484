import databricks.sdk.useragent as ua
from databricks.labs.blueprint.logger import install_logger
from databricks.labs.grantor.__about__ import __version__

install_logger()

# Add grantor/<version> for projects depending on grantor as a library
ua.with_extra("grantor", __version__)

# Add grantor/<version> for re-packaging of grantor, where product name is omitted
ua.with_product("grantor", __version__)
