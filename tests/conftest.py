from tests.fixtures.app_client import client, settings, storage_root  # noqa: F401
