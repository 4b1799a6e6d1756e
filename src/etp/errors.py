"""Exception hierarchy for template printing."""


class EtpError(Exception):
    """Base exception for all template printer errors."""

    pass


class ModelNotSupported(EtpError):
    """Printer model identifier is not registered."""

    def __init__(self, model: str):
        super().__init__(f'Model "{model}" not supported')
        self.model = model


class InvalidTemplateEncoding(EtpError):
    """Template source is not valid UTF-8 text."""

    pass


class EncodingError(EtpError):
    """Text has no representation in the printer code page."""

    pass


class TemplateExecutionError(EtpError):
    """Template could not be parsed or executed."""

    pass


class CommandError(TemplateExecutionError):
    """Printer command called with wrong arguments or invalid parameters."""

    pass
