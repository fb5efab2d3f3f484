from dataclasses import dataclass

from databricks.sdk.core import Config

__all__ = ["GrantorConfig"]


@dataclass
class GrantorConfig:
    __file__ = "config.yml"
    __version__ = 1

    warehouse_id: str | None = None
    connect: Config | None = None
    log_level: str | None = "INFO"

    # Default for grant resources that do not set enable_multiple_grants themselves
    enable_multiple_grants: bool = False

    # Privileges accepted in addition to the built-in ones, keyed by object type, e.g. {"TABLE": ["REBUILD"]}
    extra_privileges: dict[str, list[str]] | None = None
