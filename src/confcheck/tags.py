"""Serialized key paths for configuration fields.

A configuration root is a pydantic model or dataclass instance. Each field may
declare the key it is serialized under, per naming scheme:

    @dataclass
    class Server:
        port: int = field(default=INT_UNDEFINED, metadata={"yaml": "port"})

    class Server(BaseModel):
        port: int = Field(default=INT_UNDEFINED, json_schema_extra={"yaml": "port"})

Fields are addressed by identity through ``FieldRef`` (owning object plus
attribute name), and ``resolve_tag_path`` walks the root to recover the dotted
path of such a reference, e.g. ``server.port``.
"""

import dataclasses
from dataclasses import dataclass
from typing import Any, Iterator

from pydantic import BaseModel

from .errors import IllegalFieldReferenceError


@dataclass(frozen=True)
class TagScheme:
    """Name of the tag key to read and separator to join path segments with."""
    key: str
    separator: str = "."


JSON_SCHEME = TagScheme("json", ".")
YAML_SCHEME = TagScheme("yaml", ".")


@dataclass(frozen=True, eq=False)
class FieldRef:
    """Reference to one attribute of one specific object.

    Two references designate the same field only when they share the same
    owner object (identity, not equality) and the same attribute name.
    """
    owner: Any
    name: str

    def get(self) -> Any:
        return getattr(self.owner, self.name)

    def set(self, value: Any) -> None:
        setattr(self.owner, self.name, value)

    def __str__(self) -> str:
        return f"{type(self.owner).__name__}.{self.name}"


def ref(owner: Any, name: str) -> FieldRef:
    """Build a reference to ``owner.name``."""
    if not hasattr(owner, name):
        raise IllegalFieldReferenceError(
            f"{type(owner).__name__} has no attribute '{name}'"
        )
    return FieldRef(owner, name)


def is_structure(value: Any) -> bool:
    """True for pydantic model and dataclass instances (not classes)."""
    if isinstance(value, type):
        return False
    return isinstance(value, BaseModel) or dataclasses.is_dataclass(value)


def is_structure_type(value: Any) -> bool:
    """True for pydantic model and dataclass classes."""
    if not isinstance(value, type):
        return False
    return issubclass(value, BaseModel) or dataclasses.is_dataclass(value)


def field_tags(scheme: TagScheme, model: Any) -> Iterator[tuple[str, str]]:
    """Yield ``(attribute, local tag)`` for each field of a model, in declaration order.

    ``model`` may be a class or an instance. The local tag is the first
    comma-separated segment of the tag declared under ``scheme.key``; options
    such as ``omitempty`` are dropped. Without a declared tag, the pydantic
    alias and then the attribute name are used.
    """
    model_type = model if isinstance(model, type) else type(model)

    if issubclass(model_type, BaseModel):
        for name, info in model_type.model_fields.items():
            declared = None
            if isinstance(info.json_schema_extra, dict):
                declared = info.json_schema_extra.get(scheme.key)
            if not declared:
                declared = info.serialization_alias or info.alias
            yield name, _local_tag(declared, name)
    elif dataclasses.is_dataclass(model_type):
        for f in dataclasses.fields(model_type):
            yield f.name, _local_tag(f.metadata.get(scheme.key), f.name)


def _local_tag(declared: Any, fallback: str) -> str:
    if not declared:
        return fallback
    local = str(declared).split(",")[0]
    return local or fallback


def _join(scheme: TagScheme, prefix: str, local: str) -> str:
    if prefix == "":
        return local
    return f"{prefix}{scheme.separator}{local}"


def resolve_tag_path(scheme: TagScheme, root: Any, target: FieldRef) -> tuple[str, bool]:
    """Find the serialized key path of ``target`` inside ``root``.

    Returns:
        ``(path, True)`` for the first match of a depth-first walk in
        declaration order, ``("", False)`` when the field is not reachable
        from ``root``.

    Raises:
        IllegalFieldReferenceError: If ``target`` is not a reference to a
            scalar field (e.g. it designates a nested structure).
    """
    if not isinstance(target, FieldRef):
        raise IllegalFieldReferenceError(
            f"Field reference required, got {type(target).__name__}"
        )
    if not hasattr(target.owner, target.name):
        raise IllegalFieldReferenceError(
            f"{type(target.owner).__name__} has no attribute '{target.name}'"
        )
    if is_structure(target.get()):
        raise IllegalFieldReferenceError(f"Illegal structure value for {target}")

    return _resolve(scheme, root, target, "", set())


def _resolve(
    scheme: TagScheme, node: Any, target: FieldRef, prefix: str, visited: set[int]
) -> tuple[str, bool]:
    # visited holds ids of structures already walked; back-references end the walk
    if not is_structure(node) or id(node) in visited:
        return "", False
    visited.add(id(node))

    for name, local in field_tags(scheme, node):
        path = _join(scheme, prefix, local)
        if node is target.owner and name == target.name:
            return path, True

        value = getattr(node, name, None)
        if is_structure(value):
            found_path, found = _resolve(scheme, value, target, path, visited)
            if found:
                return found_path, True

    return "", False
