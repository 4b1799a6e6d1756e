"""
Printer models.

A model owns its composed command table and may replace the default
line ending conversion. Models are built from a static registry keyed
by identifier; adding a model means adding a factory here.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping, Optional

from .commands import COMMON_COMMANDS, CommandTable, Remove
from .errors import ModelNotSupported

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Model:
    """A printer family.

    Attributes:
        name: Registry identifier (e.g., "TM-T88IV")
        commands: Fully composed command table for this model
        convert_newlines: Optional line ending rule replacing the default
    """

    name: str
    commands: CommandTable
    convert_newlines: Optional[Callable[[str], str]] = None


def _tm_t88iv() -> Model:
    # No double-strike/double-size mode on this hardware
    return Model(
        name="TM-T88IV",
        commands=COMMON_COMMANDS.specialize(Remove("ds"), Remove("nods")),
    )


AVAILABLE_MODELS: Mapping[str, Callable[[], Model]] = MappingProxyType({
    "TM-T88IV": _tm_t88iv,
})


def model_names() -> list[str]:
    """Get registered model identifiers, sorted."""
    return sorted(AVAILABLE_MODELS)


def resolve_model(identifier: str) -> Model:
    """
    Build the model registered under identifier.

    Raises:
        ModelNotSupported: If no such model is registered
    """
    factory = AVAILABLE_MODELS.get(identifier)
    if factory is None:
        raise ModelNotSupported(identifier)
    model = factory()
    logger.debug("Resolved model %s (%d commands)", model.name, len(model.commands))
    return model
