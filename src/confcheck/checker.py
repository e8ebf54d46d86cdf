"""Declarative rule registration and evaluation against one configuration.

Typical use:

    checker = Checker.for_yaml(config)
    checker.string_mandatory(ref(config.database, "host"))
    checker.int_mandatory_when(ref(config.database, "port"),
                               checker.string_equals(ref(config.database, "kind"), "postgres"))
    ok, messages = checker.verify()

Every rule is evaluated, in registration order, so one pass reports the full
set of violations.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol, Sequence

from .conditions import Condition, and_, when
from .errors import IllegalConfigError
from .tags import JSON_SCHEME, YAML_SCHEME, FieldRef, TagScheme, is_structure, resolve_tag_path

logger = logging.getLogger(__name__)

# Reserved "not configured" integer, distinct from an explicit 0.
INT_UNDEFINED = -1


class Verifier(Protocol):
    """One registered rule."""

    def verify(self) -> tuple[bool, list[str]]:
        ...


@dataclass(frozen=True)
class ConditionVerifier:
    """Verifier reporting the condition's description when it does not hold."""
    cond: Condition

    def verify(self) -> tuple[bool, list[str]]:
        if self.cond.evaluate():
            return True, []
        return False, [self.cond.description()]


@dataclass
class CheckReport:
    """Outcome of one verification pass."""
    passed: bool
    messages: list[str] = field(default_factory=list)
    rules_evaluated: int = 0

    @property
    def exit_code(self) -> int:
        """Exit code for CI: 0 = all rules passed, 1 = violations."""
        return 0 if self.passed else 1

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "passed": self.passed,
            "exit_code": self.exit_code,
            "rules_evaluated": self.rules_evaluated,
            "messages": list(self.messages),
        }


class Checker:
    """Accumulates rules over the fields of one configuration instance."""

    def __init__(self, config: Any, scheme: TagScheme = JSON_SCHEME):
        if not is_structure(config):
            raise IllegalConfigError(
                f"Illegal config: must be a model or dataclass instance, got {type(config).__name__}"
            )
        self.config = config
        self.scheme = scheme
        self.verifiers: list[Verifier] = []

    @classmethod
    def for_json(cls, config: Any) -> "Checker":
        return cls(config, JSON_SCHEME)

    @classmethod
    def for_yaml(cls, config: Any) -> "Checker":
        return cls(config, YAML_SCHEME)

    def tag_path(self, entry: FieldRef) -> tuple[str, bool]:
        """Serialized key path of ``entry`` within the checked configuration."""
        return resolve_tag_path(self.scheme, self.config, entry)

    def _name(self, entry: FieldRef) -> str:
        path, found = self.tag_path(entry)
        if found:
            return path
        return f"entry holding value {entry.get()}"

    # Registration

    def add_verifier(self, verifier: Verifier) -> None:
        self.verifiers.append(verifier)

    def add_condition(self, evaluate: Callable[[], bool], describe: Callable[[], str]) -> None:
        """Register an arbitrary condition as a rule."""
        self.add_verifier(ConditionVerifier(when(describe, evaluate)))
        logger.debug(f"Registered rule #{len(self.verifiers)}")

    def _add(self, cond: Condition) -> None:
        self.add_condition(cond.evaluate, cond.description)

    # Standalone conditions, for use as triggers of the *_when rules

    def string_equals(self, entry: FieldRef, value: str) -> Condition:
        return when(
            lambda: f"{self._name(entry)}={value}",
            lambda: entry.get() == value)

    def string_not_empty(self, entry: FieldRef) -> Condition:
        return when(
            lambda: f"{self._name(entry)} is not empty",
            lambda: _is_set(entry))

    def string_in(self, entry: FieldRef, values: Sequence[str]) -> Condition:
        return when(
            lambda: f"{self._name(entry)} is one of {list(values)}",
            lambda: entry.get() in values)

    def int_equals(self, entry: FieldRef, value: int) -> Condition:
        return when(
            lambda: f"{self._name(entry)}={value}",
            lambda: entry.get() == value)

    def bool_equals(self, entry: FieldRef, value: bool) -> Condition:
        return when(
            lambda: f"{self._name(entry)}={str(value).lower()}",
            lambda: entry.get() == value)

    # Rules

    def string_mandatory(self, entry: FieldRef) -> None:
        self.add_condition(lambda: _is_set(entry), self._describe_mandatory(entry))

    def string_mandatory_when(self, entry: FieldRef, cond: Condition) -> None:
        self.add_condition(
            lambda: _is_set(entry) or not cond.evaluate(),
            self._describe_when(self._describe_mandatory(entry), cond))

    def string_xor(self, first: FieldRef, second: FieldRef) -> None:
        self.add_condition(
            lambda: _is_set(first) != _is_set(second),
            self._describe_xor(first, second))

    def string_xor_when(self, first: FieldRef, second: FieldRef, cond: Condition) -> None:
        self.add_condition(
            lambda: (_is_set(first) != _is_set(second)) or not cond.evaluate(),
            self._describe_when(self._describe_xor(first, second), cond))

    def string_pattern(self, entry: FieldRef, pattern: str) -> re.error | None:
        """Require ``entry`` to match ``pattern`` (``re.search`` semantics).

        Returns the compilation error instead of registering the rule when
        ``pattern`` is not a valid regular expression.
        """
        try:
            regex = re.compile(pattern)
        except re.error as e:
            logger.warning(f"Pattern rule not registered, invalid pattern {pattern!r}: {e}")
            return e

        self.add_condition(
            lambda: regex.search(entry.get() or "") is not None,
            lambda: f"{self._name(entry)} must match pattern {pattern}")
        return None

    def enum_optional(self, entry: FieldRef, values: Sequence[str], default: str) -> None:
        """Require ``entry`` to be one of ``values`` when set.

        ``default`` documents the fallback value; applying it is left to the
        caller (see ``confcheck.defaults.set_default_string``).
        """
        self._add(self._enum_value_condition(entry, values))

    def enum_mandatory(self, entry: FieldRef, values: Sequence[str]) -> None:
        self._add(and_(
            when(self._describe_mandatory(entry), lambda: _is_set(entry)),
            self._enum_value_condition(entry, values),
        ))

    def enum_mandatory_when(self, entry: FieldRef, values: Sequence[str], cond: Condition) -> None:
        self._add(and_(
            when(
                self._describe_when(self._describe_mandatory(entry), cond),
                lambda: _is_set(entry) or not cond.evaluate()),
            self._enum_value_condition(entry, values),
        ))

    def int_mandatory(self, entry: FieldRef) -> None:
        self.add_condition(lambda: entry.get() != INT_UNDEFINED, self._describe_mandatory(entry))

    def int_mandatory_when(self, entry: FieldRef, cond: Condition) -> None:
        self.add_condition(
            lambda: entry.get() != INT_UNDEFINED or not cond.evaluate(),
            self._describe_when(self._describe_mandatory(entry), cond))

    # Evaluation

    def report(self) -> CheckReport:
        """Evaluate every registered rule and collect the failure messages in order."""
        logger.info(f"Running {len(self.verifiers)} configuration rules")

        passed = True
        messages: list[str] = []
        for verifier in self.verifiers:
            ok, verifier_messages = verifier.verify()
            if not ok:
                passed = False
                messages.extend(verifier_messages)

        logger.info(f"Configuration check completed: {len(messages)} violation(s)")
        return CheckReport(passed=passed, messages=messages, rules_evaluated=len(self.verifiers))

    def verify(self) -> tuple[bool, list[str]]:
        report = self.report()
        return report.passed, report.messages

    # Descriptions

    def _enum_value_condition(self, entry: FieldRef, values: Sequence[str]) -> Condition:
        return when(
            lambda: f"value of {self._name(entry)} must be in {list(values)}",
            lambda: not _is_set(entry) or entry.get() in values)

    def _describe_mandatory(self, entry: FieldRef) -> Callable[[], str]:
        return lambda: f"{self._name(entry)} is mandatory"

    def _describe_xor(self, first: FieldRef, second: FieldRef) -> Callable[[], str]:
        return lambda: (
            f"either {self._name(first)} or {self._name(second)} is mandatory, "
            "but only one can be set"
        )

    def _describe_when(self, describe: Callable[[], str], cond: Condition) -> Callable[[], str]:
        return lambda: f"{describe()} when {cond.description()}"


def _is_set(entry: FieldRef) -> bool:
    # None counts as empty for Optional[str] fields
    return entry.get() not in ("", None)
