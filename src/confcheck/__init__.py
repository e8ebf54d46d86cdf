"""confcheck - Declarative validation of configuration data.

confcheck evaluates rules such as "field X is mandatory" or "exactly one of A
or B must be set" against a loaded configuration model, and reports every
violation using the field's serialized key path.
"""

__version__ = "0.1.0"
__description__ = "Declarative validation of configuration documents"

from confcheck.checker import INT_UNDEFINED, Checker, CheckReport, ConditionVerifier, Verifier
from confcheck.conditions import Condition, and_, or_, when
from confcheck.errors import (
    ConfcheckError,
    DocumentError,
    IllegalConfigError,
    IllegalFieldReferenceError,
    RuleImportError,
    SettingsError,
)
from confcheck.tags import JSON_SCHEME, YAML_SCHEME, FieldRef, TagScheme, ref, resolve_tag_path

__all__ = [
    "__version__",
    "__description__",
    "INT_UNDEFINED",
    "Checker",
    "CheckReport",
    "ConditionVerifier",
    "Verifier",
    "Condition",
    "when",
    "and_",
    "or_",
    "ConfcheckError",
    "DocumentError",
    "IllegalConfigError",
    "IllegalFieldReferenceError",
    "RuleImportError",
    "SettingsError",
    "JSON_SCHEME",
    "YAML_SCHEME",
    "FieldRef",
    "TagScheme",
    "ref",
    "resolve_tag_path",
]
