from collections.abc import Iterable, Mapping
from enum import Enum
from types import MappingProxyType


class ObjectType(Enum):
    STREAM = "STREAM"
    VIEW = "VIEW"
    TABLE = "TABLE"
    TAG = "TAG"

    @property
    def plural(self) -> str:
        return f"{self.value}S"

    @property
    def supports_future(self) -> bool:
        return self is not ObjectType.TAG


class PrivilegeSet:
    """Immutable set of privilege names, compared case-insensitively."""

    def __init__(self, *privileges: str):
        self._privileges = frozenset(privilege.upper() for privilege in privileges)

    def __contains__(self, privilege: object) -> bool:
        return isinstance(privilege, str) and privilege.upper() in self._privileges

    def __iter__(self):
        return iter(self.to_list())

    def __len__(self) -> int:
        return len(self._privileges)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, PrivilegeSet) and self._privileges == other._privileges

    def __hash__(self) -> int:
        return hash(self._privileges)

    def __repr__(self) -> str:
        return f"PrivilegeSet({', '.join(self.to_list())})"

    def to_list(self) -> list[str]:
        return sorted(self._privileges)

    def union(self, privileges: Iterable[str]) -> "PrivilegeSet":
        return PrivilegeSet(*self._privileges, *privileges)


PRIVILEGE_OWNERSHIP = "OWNERSHIP"
PRIVILEGE_SELECT = "SELECT"
PRIVILEGE_REFERENCES = "REFERENCES"
PRIVILEGE_APPLY = "APPLY"

DEFAULT_PRIVILEGES: Mapping[ObjectType, PrivilegeSet] = MappingProxyType(
    {
        ObjectType.STREAM: PrivilegeSet(PRIVILEGE_OWNERSHIP, PRIVILEGE_SELECT),
        ObjectType.VIEW: PrivilegeSet(PRIVILEGE_OWNERSHIP, PRIVILEGE_REFERENCES, PRIVILEGE_SELECT),
        ObjectType.TABLE: PrivilegeSet(
            PRIVILEGE_OWNERSHIP,
            PRIVILEGE_SELECT,
            "INSERT",
            "UPDATE",
            "DELETE",
            "TRUNCATE",
            PRIVILEGE_REFERENCES,
        ),
        ObjectType.TAG: PrivilegeSet(PRIVILEGE_OWNERSHIP, PRIVILEGE_APPLY),
    }
)


def privilege_table(extra: Mapping[str, list[str]] | None = None) -> Mapping[ObjectType, PrivilegeSet]:
    """Builds the read-only privilege table, adding configured privileges (keyed by object type name)."""
    table = dict(DEFAULT_PRIVILEGES)
    for object_type, privileges in (extra or {}).items():
        key = ObjectType(object_type.upper())
        table[key] = table[key].union(privileges)
    return MappingProxyType(table)
