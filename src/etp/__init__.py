"""ESC/POS Template Printer."""

__version__ = "0.1.0"

from .commands import (
    COMMON_COMMANDS,
    Add,
    Arg,
    Command,
    CommandTable,
    ESCPOSCommands,
    Remove,
)
from .encoding import Encoder
from .errors import (
    CommandError,
    EncodingError,
    EtpError,
    InvalidTemplateEncoding,
    ModelNotSupported,
    TemplateExecutionError,
)
from .models import AVAILABLE_MODELS, Model, model_names, resolve_model
from .printer import HELPERS, Binding, Printer, render_template

__all__ = [
    "Printer",
    "render_template",
    "Binding",
    "HELPERS",
    "Model",
    "AVAILABLE_MODELS",
    "model_names",
    "resolve_model",
    "Command",
    "CommandTable",
    "Arg",
    "Add",
    "Remove",
    "COMMON_COMMANDS",
    "ESCPOSCommands",
    "Encoder",
    "EtpError",
    "ModelNotSupported",
    "InvalidTemplateEncoding",
    "EncodingError",
    "TemplateExecutionError",
    "CommandError",
]
