from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from databricks.labs.lsql.backends import SqlBackend

from databricks.labs.grantor.errors import ValidationError


@dataclass(frozen=True)
class Field:
    type: type
    required: bool = False
    default: Any = None
    description: str = ""
    force_new: bool = False
    allowed: tuple[str, ...] | None = None
    # returns True when the old and new values are equivalent
    diff_suppress: Callable[[Any, Any], bool] | None = None

    def zero(self) -> Any:
        if self.default is not None:
            return self.default
        if self.type is frozenset:
            return frozenset()
        return self.type()

    def coerce(self, key: str, value: Any) -> Any:
        if self.type is frozenset:
            if isinstance(value, str) or not isinstance(value, Iterable):
                raise ValidationError(f"{key}: expected a set of strings, got {value!r}")
            return frozenset(value)
        if not isinstance(value, self.type):
            raise ValidationError(f"{key}: expected {self.type.__name__}, got {value!r}")
        if self.allowed is not None and value.upper() not in self.allowed:
            raise ValidationError(f"{key}: expected one of {', '.join(self.allowed)}, got {value!r}")
        if self.allowed is not None:
            return value.upper()
        return value


Schema = Mapping[str, Field]


class ResourceData:
    """
    Desired-state record of one resource instance: field values, the values they had before the
    current change, and the opaque id. An empty id means the resource does not exist.
    """

    def __init__(self, schema: Schema, values: dict[str, Any], *, resource_id: str = "", prior: dict | None = None):
        self._schema = schema
        self._values = values
        self._prior = dict(values) if prior is None else prior
        self._id = resource_id

    @classmethod
    def from_raw(
        cls,
        schema: Schema,
        raw: Mapping[str, Any],
        *,
        resource_id: str = "",
        prior: Mapping[str, Any] | None = None,
    ) -> "ResourceData":
        """Validates raw configuration against the schema once, filling in defaults."""
        values = _validate(schema, raw)
        prior_values = None if prior is None else _validate(schema, prior)
        return cls(schema, values, resource_id=resource_id, prior=prior_values)

    @property
    def id(self) -> str:
        return self._id

    def set_id(self, resource_id: str) -> None:
        self._id = resource_id

    def get(self, key: str) -> Any:
        field = self._field(key)
        return self._values.get(key, field.zero())

    def get_ok(self, key: str) -> tuple[Any, bool]:
        """Returns the value and whether it is set to something other than its zero value."""
        value = self.get(key)
        return value, bool(value)

    def set(self, key: str, value: Any) -> None:
        field = self._field(key)
        self._values[key] = field.coerce(key, value)

    def has_change(self, key: str) -> bool:
        old, new = self.get_change(key)
        if old == new:
            return False
        suppress = self._field(key).diff_suppress
        return suppress is None or not suppress(old, new)

    def has_changes(self, *keys: str) -> bool:
        return any(self.has_change(key) for key in keys)

    def requires_replace(self) -> list[str]:
        """Changed fields that cannot be updated in place."""
        return [key for key, field in self._schema.items() if field.force_new and self.has_change(key)]

    def get_change(self, key: str) -> tuple[Any, Any]:
        field = self._field(key)
        return self._prior.get(key, field.zero()), self.get(key)

    def state(self) -> dict[str, Any]:
        if not self._id:
            return {}
        return {"id": self._id, **{key: self.get(key) for key in self._schema}}

    def _field(self, key: str) -> Field:
        if key not in self._schema:
            raise KeyError(f"unknown field: {key}")
        return self._schema[key]


def _validate(schema: Schema, raw: Mapping[str, Any]) -> dict[str, Any]:
    unknown = set(raw) - set(schema)
    if unknown:
        raise ValidationError(f"unknown fields: {', '.join(sorted(unknown))}")
    values = {}
    for key, field in schema.items():
        if key not in raw or raw[key] is None:
            if field.required:
                raise ValidationError(f"{key}: required field is not set")
            values[key] = field.zero()
            continue
        values[key] = field.coerce(key, raw[key])
    return values


class Resource(ABC):
    """Lifecycle entry points the host runtime invokes for one resource type."""

    schema: Schema

    def __init__(self, backend: SqlBackend):
        self._backend = backend

    def data(self, raw: Mapping[str, Any], *, resource_id: str = "", prior: Mapping[str, Any] | None = None):
        return ResourceData.from_raw(self.schema, raw, resource_id=resource_id, prior=prior)

    def import_state(self, resource_id: str) -> ResourceData:
        """Imports an existing object: the id is taken as-is and the fields are read from the warehouse."""
        d = ResourceData(self.schema, {}, resource_id=resource_id)
        self.read(d)
        return d

    def check_in_place(self, d: ResourceData) -> None:
        """Raises before any SQL when a field that can only be set at creation has changed."""
        changed = d.requires_replace()
        if changed:
            raise ValidationError(f"cannot update {', '.join(changed)} in place, the resource must be recreated")

    @abstractmethod
    def create(self, d: ResourceData) -> None:
        raise NotImplementedError

    @abstractmethod
    def read(self, d: ResourceData) -> None:
        raise NotImplementedError

    @abstractmethod
    def update(self, d: ResourceData) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, d: ResourceData) -> None:
        raise NotImplementedError
