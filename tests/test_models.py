"""Tests for printer model resolution."""

import pytest

from etp.commands import COMMON_COMMANDS
from etp.errors import EtpError, ModelNotSupported
from etp.models import AVAILABLE_MODELS, Model, model_names, resolve_model


class TestResolveModel:
    """Test the model registry."""

    def test_resolve_tm_t88iv(self):
        """Test resolving a registered model."""
        model = resolve_model("TM-T88IV")
        assert isinstance(model, Model)
        assert model.name == "TM-T88IV"
        assert model.convert_newlines is None

    def test_unknown_model(self):
        """Unknown identifiers raise ModelNotSupported."""
        with pytest.raises(ModelNotSupported, match='Model "TM-X" not supported'):
            resolve_model("TM-X")

    def test_identifier_is_case_sensitive(self):
        """Identifiers must match exactly."""
        with pytest.raises(ModelNotSupported):
            resolve_model("tm-t88iv")

    def test_not_supported_is_etp_error(self):
        """ModelNotSupported should inherit from EtpError."""
        err = ModelNotSupported("x")
        assert isinstance(err, EtpError)
        assert err.model == "x"

    def test_model_names(self):
        """Test listing registered models."""
        assert model_names() == ["TM-T88IV"]

    def test_registry_is_read_only(self):
        """The registry cannot be modified at runtime."""
        with pytest.raises(TypeError):
            AVAILABLE_MODELS["TM-X"] = lambda: None


class TestTMT88IV:
    """Test the TM-T88IV command table."""

    def test_no_double_size(self):
        """TM-T88IV lacks double size mode."""
        model = resolve_model("TM-T88IV")
        assert model.commands.lookup("ds") is None
        assert model.commands.lookup("nods") is None

    def test_keeps_other_commands(self):
        """Every other baseline command is kept unchanged."""
        model = resolve_model("TM-T88IV")
        for name, command in COMMON_COMMANDS.items():
            if name in ("ds", "nods"):
                continue
            assert model.commands[name] is command

    def test_baseline_untouched(self):
        """Resolving the model leaves the baseline table intact."""
        resolve_model("TM-T88IV")
        assert "ds" in COMMON_COMMANDS

    def test_models_are_frozen(self):
        """Models are immutable values."""
        model = resolve_model("TM-T88IV")
        with pytest.raises(AttributeError):
            model.name = "other"
