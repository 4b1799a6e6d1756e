"""
Pytest configuration for template printer tests.

Provides a fixture rendering template bodies without the prologue.
"""

import pytest

from etp import Printer

# Emitted before every non-suppressed render: ESC @, ESC t 18
PROLOGUE = b"\x1b\x40\x1b\x74\x12"


@pytest.fixture
def body():
    """Render a template and strip the prologue."""

    def _body(template, data=None, model=None):
        output = Printer(model, template).render(data)
        assert output.startswith(PROLOGUE)
        return output[len(PROLOGUE):]

    return _body
