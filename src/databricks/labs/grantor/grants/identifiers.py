import logging
from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from databricks.labs.grantor.errors import MalformedIdentifier
from databricks.labs.grantor.framework.utils import split_string_to_set

logger = logging.getLogger(__name__)

# Multibyte delimiter: no legal object name contains it.
DELIMITER = "\u2744\ufe0f"
LEGACY_DELIMITER = "|"

_CURRENT_SEGMENTS = 6
_LEGACY_SEGMENTS = 5


@dataclass(frozen=True)
class GrantIdentifier:
    database_name: str
    schema_name: str
    object_name: str
    privilege: str
    with_grant_option: bool = False
    roles: frozenset[str] = field(default_factory=frozenset)

    @property
    def on_future(self) -> bool:
        return self.object_name == ""

    def with_roles(self, roles: Iterable[str]) -> "GrantIdentifier":
        return replace(self, roles=frozenset(roles))

    def __str__(self) -> str:
        return encode(self)


def encode(grant_id: GrantIdentifier) -> str:
    """Serializes the identifier into the durable resource id. Roles are sorted, so equal ids encode equally."""
    parts = [
        grant_id.database_name,
        grant_id.schema_name,
        grant_id.object_name,
        grant_id.privilege,
        "true" if grant_id.with_grant_option else "false",
        ",".join(sorted(grant_id.roles)),
    ]
    return DELIMITER.join(parts)


def decode(value: str) -> GrantIdentifier:
    """
    Parses a resource id produced by `encode`, or the pipe-delimited format written by earlier releases.

    Legacy ids carry no role list: the roles have to be re-read from the warehouse.

    Raises:
        MalformedIdentifier: on an unexpected number of segments or an unparseable grant option flag.
    """
    if DELIMITER not in value:
        return _decode_legacy(value)
    parts = value.split(DELIMITER)
    if len(parts) != _CURRENT_SEGMENTS:
        msg = f"unexpected number of ID parts ({len(parts)}), expected {_CURRENT_SEGMENTS}"
        raise MalformedIdentifier(msg, len(parts))
    database_name, schema_name, object_name, privilege, grant_option, roles = parts
    return GrantIdentifier(
        database_name=database_name,
        schema_name=schema_name,
        object_name=object_name,
        privilege=privilege,
        with_grant_option=_parse_flag(grant_option, len(parts)),
        roles=split_string_to_set(roles),
    )


def _decode_legacy(value: str) -> GrantIdentifier:
    parts = value.split(LEGACY_DELIMITER)
    if len(parts) != _LEGACY_SEGMENTS:
        msg = f"unexpected number of legacy ID parts ({len(parts)}), expected {_LEGACY_SEGMENTS}"
        raise MalformedIdentifier(msg, len(parts))
    logger.debug(f"Decoding legacy grant id: {value}")
    database_name, schema_name, object_name, privilege, grant_option = parts
    return GrantIdentifier(
        database_name=database_name,
        schema_name=schema_name,
        object_name=object_name,
        privilege=privilege,
        with_grant_option=_parse_flag(grant_option, len(parts)),
    )


def _parse_flag(value: str, segments: int) -> bool:
    lowered = value.lower()
    if lowered not in {"true", "false"}:
        raise MalformedIdentifier(f"invalid with_grant_option value: {value!r}", segments)
    return lowered == "true"
