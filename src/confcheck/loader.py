"""Caller-side loading of configuration documents into models.

Checks run against model instances; this module turns a JSON or YAML file
into one. Every field is read from the key its declared tag names under the
scheme, the same key checker messages report. dataclasses are built field by
field; documents for pydantic models are rekeyed and passed to
``model_validate``.
"""

import dataclasses
import importlib
import json
import logging
import types
import typing
from pathlib import Path
from typing import Any, TypeVar

import yaml
from pydantic import BaseModel
from pydantic.fields import FieldInfo

from .errors import DocumentError, RuleImportError
from .tags import JSON_SCHEME, TagScheme, field_tags, is_structure_type

logger = logging.getLogger(__name__)

T = TypeVar("T")

YAML_SUFFIXES = (".yaml", ".yml")


def load_document(path: str | Path) -> dict[str, Any]:
    """Read a JSON or YAML document whose top level is a mapping.

    Raises:
        DocumentError: If the file is missing, unparsable, has an unknown
            suffix or does not hold a mapping.
    """
    path = Path(path)
    if not path.exists():
        raise DocumentError("Configuration document not found", str(path))

    suffix = path.suffix.lower()
    if suffix != ".json" and suffix not in YAML_SUFFIXES:
        raise DocumentError(
            f"Unsupported document type '{suffix}', expected .json, .yaml or .yml",
            str(path),
        )

    try:
        with open(path, encoding="utf-8") as f:
            if suffix == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except json.JSONDecodeError as e:
        raise DocumentError("Invalid JSON configuration", str(path), e) from e
    except yaml.YAMLError as e:
        raise DocumentError("Invalid YAML configuration", str(path), e) from e
    except UnicodeDecodeError as e:
        raise DocumentError("Configuration document is not valid UTF-8", str(path), e) from e
    except OSError as e:
        raise DocumentError("Cannot read configuration document", str(path), e) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise DocumentError(
            f"Top-level structure must be a mapping, got {type(data).__name__}",
            str(path),
        )

    logger.debug(f"Loaded {len(data)} top-level keys from {path}")
    return data


def build_config(model: type[T], data: dict[str, Any], scheme: TagScheme = JSON_SCHEME) -> T:
    """Instantiate ``model`` from a loaded document.

    Raises:
        DocumentError: If the data does not fit the model.
    """
    if not is_structure_type(model):
        raise DocumentError(f"{model!r} is not a pydantic model or dataclass")

    try:
        if issubclass(model, BaseModel):
            return model.model_validate(_model_input(model, data, scheme))
        return _build_dataclass(model, data, scheme)
    except DocumentError:
        raise
    except (TypeError, ValueError) as e:
        raise DocumentError(f"Document does not match {model.__name__}", original_error=e) from e


def _input_key(name: str, info: FieldInfo) -> str:
    """Key under which ``model_validate`` reads a field."""
    if isinstance(info.validation_alias, str):
        return info.validation_alias
    return info.alias or name


def _model_input(model: type[BaseModel], data: dict[str, Any], scheme: TagScheme) -> dict[str, Any]:
    """Rekey a document from tagged keys to the keys the model validates.

    Keys naming no field are passed through so that ``extra="forbid"``
    models still reject them. A key the model would read by alias but the
    scheme does not tag is dropped.
    """
    fields = model.model_fields
    tags = dict(field_tags(scheme, model))
    input_keys = {name: _input_key(name, info) for name, info in fields.items()}
    known = set(tags.values()) | set(input_keys.values())

    rekeyed = {key: value for key, value in data.items() if key not in known}
    for name, key in tags.items():
        if key not in data:
            continue
        value = data[key]
        nested = _structure_type(fields[name].annotation)
        if nested is not None and isinstance(value, dict):
            if issubclass(nested, BaseModel):
                value = _model_input(nested, value, scheme)
            else:
                value = _build_dataclass(nested, value, scheme)
        rekeyed[input_keys[name]] = value
    return rekeyed


def _build_dataclass(model: type, data: dict[str, Any], scheme: TagScheme) -> Any:
    hints = typing.get_type_hints(model)
    init_names = {f.name for f in dataclasses.fields(model) if f.init}
    kwargs = {}

    for name, key in field_tags(scheme, model):
        if name not in init_names or key not in data:
            continue
        value = data[key]
        nested = _structure_type(hints.get(name))
        if nested is not None and isinstance(value, dict):
            value = build_config(nested, value, scheme)
        kwargs[name] = value

    return model(**kwargs)


def _structure_type(hint: Any) -> type | None:
    """Structure class behind a field annotation, unwrapping ``Optional``."""
    if is_structure_type(hint):
        return hint
    if typing.get_origin(hint) in (typing.Union, types.UnionType):
        for arg in typing.get_args(hint):
            if is_structure_type(arg):
                return arg
    return None


def load_config(path: str | Path, model: type[T], scheme: TagScheme = JSON_SCHEME) -> T:
    """Load a document from ``path`` and build a ``model`` instance from it."""
    data = load_document(path)
    try:
        config = build_config(model, data, scheme)
    except DocumentError as e:
        e.source = str(path)
        raise
    logger.info(f"Loaded {model.__name__} from {path}")
    return config


def import_object(spec: str) -> Any:
    """Import ``package.module:attribute``.

    Raises:
        RuleImportError: If the string is malformed or cannot be imported.
    """
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise RuleImportError(f"Expected 'module:attribute', got '{spec}'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise RuleImportError(f"Cannot import module '{module_name}'", original_error=e) from e

    obj = module
    for part in attr.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise RuleImportError(f"Module '{module_name}' has no attribute '{attr}'") from e
    return obj
