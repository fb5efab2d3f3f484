import pytest
from databricks.labs.blueprint.installation import MockInstallation
from databricks.labs.lsql.backends import MockBackend

from databricks.labs.grantor.contexts.application import GlobalContext

from . import mock_workspace_client


@pytest.fixture()
def mock_installation() -> MockInstallation:
    return MockInstallation(
        {
            'config.yml': {
                'version': 1,
                'warehouse_id': 'abc',
                'connect': {
                    'host': 'adb-9999999999999999.14.azuredatabricks.net',
                    'token': '...',
                },
            },
        }
    )


@pytest.fixture()
def ctx(mock_installation) -> GlobalContext:
    return GlobalContext().replace(
        workspace_client=mock_workspace_client(),
        sql_backend=MockBackend(),
        installation=mock_installation,
    )
