from .attributes import AttributeFormatter
from .config import FormConfig, load_config
from .declarations import DeclaredPage, load_declaration
from .errors import (
    DeclarationError,
    InvalidField,
    OrderingViolation,
    SettingsFormError,
    StoreLoadError,
    StoreWriteError,
    SubmissionError,
    UnknownSection,
    UnsupportedStore,
)
from .escaping import AllowListEscaper, MarkupEscaper, MarkupSafeEscaper
from .kinds import FieldKind
from .model import FieldDefinition, RegistrationState, SectionDefinition
from .page import SettingsPage, SettingsPageHost
from .registration import RegistrationEngine
from .render import RenderEngine, RenderPass
from .stores import InMemoryOptionStore, OptionStore, get_store_for_path
from .submission import parse_submission
from .values import ValueResolver


__all__ = [
    "AllowListEscaper",
    "AttributeFormatter",
    "DeclarationError",
    "DeclaredPage",
    "FieldDefinition",
    "FieldKind",
    "FormConfig",
    "InMemoryOptionStore",
    "InvalidField",
    "MarkupEscaper",
    "MarkupSafeEscaper",
    "OptionStore",
    "OrderingViolation",
    "RegistrationEngine",
    "RegistrationState",
    "RenderEngine",
    "RenderPass",
    "SectionDefinition",
    "SettingsFormError",
    "SettingsPage",
    "SettingsPageHost",
    "StoreLoadError",
    "StoreWriteError",
    "SubmissionError",
    "UnknownSection",
    "UnsupportedStore",
    "ValueResolver",
    "get_store_for_path",
    "load_config",
    "load_declaration",
    "parse_submission",
]
