class SettingsFormError(Exception):
    """Base class for settingsform errors."""


class OrderingViolation(SettingsFormError):
    """Raised when sections or fields are declared out of order.

    Covers declarations made outside the registration phase, nested sections,
    fields registered with no open section and closing a section when none is
    open.  Also raised when rendering is attempted before registration
    completes.
    """


class InvalidField(SettingsFormError):
    """Raised when a field or section declaration is malformed."""


class UnknownSection(SettingsFormError):
    """Raised when rendering a section that was never registered."""


class StoreLoadError(SettingsFormError):
    """Raised when an option store fails to read its backing file."""


class StoreWriteError(SettingsFormError):
    """Raised when an option store fails to persist a record."""


class DeclarationError(SettingsFormError):
    """Raised when a declaration file cannot be parsed."""


class SubmissionError(SettingsFormError):
    """Raised when posted form data does not belong to the page."""


class UnsupportedStore(SettingsFormError, ValueError):
    """Raised when no option store handles a file's suffix."""
