"""The Foo custom resource of the apps.educative.io/v1beta1 API group."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

__all__ = [
    "GroupVersion",
    "FooSpec",
    "FooStatus",
    "Foo",
    "FooList",
    "Scheme",
    "GROUP_VERSION",
    "add_to_scheme",
]


@dataclass(frozen=True)
class GroupVersion:
    """An API group together with one of its versions."""

    group: str
    version: str

    def api_version(self) -> str:
        """Return the ``apiVersion`` string, ``group/version`` or bare version."""
        return f"{self.group}/{self.version}" if self.group else self.version

    def __str__(self) -> str:
        return self.api_version()


GROUP_VERSION = GroupVersion(group="apps.educative.io", version="v1beta1")


@dataclass
class FooSpec:
    """Desired state of a Foo."""

    foo: str = ""


@dataclass
class FooStatus:
    """Observed state of a Foo."""


def _mapping(value: Any, name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{name} must be an object")
    return value


def _string(data: dict[str, Any], key: str, default: str) -> str:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string")
    return value


def _type_meta(obj: Any) -> dict[str, Any]:
    result: dict[str, Any] = {}
    if obj.api_version:
        result["apiVersion"] = obj.api_version
    if obj.kind:
        result["kind"] = obj.kind
    return result


@dataclass
class Foo:
    """The Schema for the foos API."""

    metadata: dict[str, Any] = field(default_factory=dict)
    spec: FooSpec = field(default_factory=FooSpec)
    status: FooStatus = field(default_factory=FooStatus)
    api_version: str = GROUP_VERSION.api_version()
    kind: str = "Foo"

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form of this object."""
        result = _type_meta(self)
        result["metadata"] = copy.deepcopy(self.metadata)
        result["spec"] = {"foo": self.spec.foo} if self.spec.foo else {}
        result["status"] = {}
        return result

    @classmethod
    def from_dict(cls, data: Any) -> Foo:
        """Build a Foo from its JSON form, raising ValueError on bad shapes."""
        data = _mapping(data, "Foo")
        spec = _mapping(data.get("spec"), "spec")
        _mapping(data.get("status"), "status")
        return cls(
            metadata=copy.deepcopy(_mapping(data.get("metadata"), "metadata")),
            spec=FooSpec(foo=_string(spec, "foo", "")),
            status=FooStatus(),
            api_version=_string(data, "apiVersion", GROUP_VERSION.api_version()),
            kind=_string(data, "kind", "Foo"),
        )


@dataclass
class FooList:
    """A list of Foo objects."""

    items: list[Foo] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    api_version: str = GROUP_VERSION.api_version()
    kind: str = "FooList"

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form of this list."""
        result = _type_meta(self)
        result["metadata"] = copy.deepcopy(self.metadata)
        result["items"] = [item.to_dict() for item in self.items]
        return result

    @classmethod
    def from_dict(cls, data: Any) -> FooList:
        """Build a FooList from its JSON form, raising ValueError on bad shapes."""
        data = _mapping(data, "FooList")
        items = data.get("items")
        if items is None:
            items = []
        if not isinstance(items, list):
            raise ValueError("items must be an array")
        return cls(
            items=[Foo.from_dict(item) for item in items],
            metadata=copy.deepcopy(_mapping(data.get("metadata"), "metadata")),
            api_version=_string(data, "apiVersion", GROUP_VERSION.api_version()),
            kind=_string(data, "kind", "FooList"),
        )


class Scheme:
    """Registry mapping (apiVersion, kind) pairs to the types that represent them."""

    def __init__(self) -> None:
        self._types: dict[tuple[str, str], type] = {}

    def add_known_type(self, group_version: GroupVersion, kind_type: type) -> None:
        """Register ``kind_type`` under its class name in ``group_version``."""
        key = (group_version.api_version(), kind_type.__name__)
        existing = self._types.get(key)
        if existing is not None and existing is not kind_type:
            raise ValueError(
                f"double registration of different types for {key[1]} in {key[0]}"
            )
        self._types[key] = kind_type

    def lookup(self, api_version: str, kind: str) -> type:
        """Return the type registered for ``kind`` in ``api_version``."""
        try:
            return self._types[(api_version, kind)]
        except KeyError:
            raise KeyError(
                f"no kind {kind!r} is registered for version {api_version!r}"
            ) from None


def add_to_scheme(scheme: Scheme) -> None:
    """Register Foo and FooList in the given scheme."""
    for kind_type in (Foo, FooList):
        scheme.add_known_type(GROUP_VERSION, kind_type)