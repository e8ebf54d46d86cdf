"""Exceptions raised by confcheck.

Rule violations are never raised: they are returned as messages by
``Checker.verify``. The exceptions below either signal incorrect API usage
(the ``TypeError`` subclasses) or a configuration document that could not be
turned into a model.
"""


class ConfcheckError(Exception):
    """Base confcheck error."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.source = source
        self.original_error = original_error
        super().__init__(self.message)

    def __str__(self) -> str:
        base_msg = self.message
        if self.source:
            base_msg = f"{base_msg} (file: {self.source})"
        if self.original_error:
            base_msg = f"{base_msg} - Original error: {self.original_error}"
        return base_msg


class IllegalConfigError(ConfcheckError, TypeError):
    """A checker was built around something that is not a model instance."""


class IllegalFieldReferenceError(ConfcheckError, TypeError):
    """A tag path was requested for something that is not a scalar field."""


class DocumentError(ConfcheckError, ValueError):
    """A configuration document could not be read or turned into a model."""


class RuleImportError(ConfcheckError, ImportError):
    """A ``module:attribute`` specification could not be imported."""


class SettingsError(ConfcheckError, ValueError):
    """The confcheck settings file is missing, unreadable or invalid."""
