"""
Template Printer.

Renders Jinja templates into ESC/POS byte streams. Template text and
data are encoded into the printer code page; command calls emit device
bytes that are never re-encoded.

Example template::

    {{ center() }}{{ b() }}{{ shop }}{{ nob() }}
    {{ left() }}{% for item in items %}{{ item.name }} {{ item.price }}
    {% endfor %}{{ pf(3) }}
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, BinaryIO, Optional, Union

from jinja2 import Environment, StrictUndefined, Template, TemplateError, Undefined
from jinja2.ext import Extension
from jinja2.lexer import Token

from .commands import ESC, COMMON_COMMANDS, Arg, Command, CommandTable, ESCPOSCommands
from .encoding import TRANSPORT_CODEC, Encoder
from .errors import (
    CommandError,
    EncodingError,
    InvalidTemplateEncoding,
    TemplateExecutionError,
)
from .models import Model, resolve_model

logger = logging.getLogger(__name__)


# --- Helper commands (available on every model) ---


def _raw(*data: int) -> bytes:
    return bytes(data)


def _esc(*data: int) -> bytes:
    return bytes([ESC]) + bytes(data)


def _raw_file(path: str) -> bytes:
    # Unreadable files render as nothing
    try:
        return Path(path).read_bytes()
    except OSError as e:
        logger.debug("rawFile %r unreadable, writing nothing: %s", path, e)
        return b""


HELPERS = CommandTable({
    "raw": Command("(...byte) Write bytes without encoding", _raw, (Arg.BYTES,)),
    "esc": Command(
        '(...byte) Write escape command followed by bytes of your choice (equals "raw 0x1b ...byte")',
        _esc, (Arg.BYTES,),
    ),
    "rawFile": Command(
        "(string) Write file content without encoding. If file read fails, return empty string.",
        _raw_file, (Arg.STRING,),
    ),
})


class Binding:
    """
    Template callable for a command.

    Calling it returns the command bytes as a transport string. A binding
    used without a call (``{{ b }}``) renders as a call with no arguments.
    Suppressed bindings accept anything and render nothing.
    """

    def __init__(self, name: str, command: Command, suppressed: bool = False):
        self.name = name
        self.command = command
        self.suppressed = suppressed

    def __call__(self, *args) -> str:
        if self.suppressed:
            return ""
        for arg in args:
            if isinstance(arg, Undefined):
                # Raises UndefinedError naming the missing variable
                arg._fail_with_undefined_error()
        try:
            data = self.command.invoke(*args)
        except CommandError as e:
            raise CommandError(f"{self.name}: {e}") from e
        return data.decode(TRANSPORT_CODEC)

    def __str__(self) -> str:
        return self()

    def __repr__(self) -> str:
        return f"Binding({self.name}{self.command.signature})"


# Stands in for CR while Jinja lexes the source. Jinja treats it as
# whitespace but not as a line break, and it is not in any code page.
CR_PLACEHOLDER = "\u2029"


class PrintTextExtension(Extension):
    """
    Prepares literal template text for the printer.

    The source is lexed as Unicode with every CR replaced by
    CR_PLACEHOLDER, so Jinja only sees LF as a line break. Literal text
    gets its CRs back, goes through ``environment.convert_newlines`` and is
    then encoded with ``environment.encode_text``. String literals are
    only encoded.
    """

    def __init__(self, environment: Environment):
        super().__init__(environment)
        environment.extend(convert_newlines=None, encode_text=None)

    def filter_stream(self, stream):
        env = self.environment
        for token in stream:
            if token.type in ("data", "string"):
                value = token.value.replace(CR_PLACEHOLDER, "\r")
                if token.type == "data" and env.convert_newlines is not None:
                    value = env.convert_newlines(value)
                if env.encode_text is not None:
                    value = env.encode_text(value)
                token = Token(token.lineno, token.type, value)
            yield token


def _check_template(template: Union[str, bytes]) -> str:
    if isinstance(template, bytes):
        try:
            return template.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidTemplateEncoding("not valid utf8 template") from e
    try:
        template.encode("utf-8")
    except UnicodeEncodeError as e:
        raise InvalidTemplateEncoding("not valid utf8 template") from e
    return template


class Printer:
    """
    Renders one template for one printer model.

    Rendering does not change the instance, so the same printer can render
    any number of data sets, also from several threads.
    """

    def __init__(self, model_name: Optional[str] = None,
                 template: Union[str, bytes] = "",
                 suppress_commands: bool = False):
        """
        Create a template printer.

        Args:
            model_name: Registered model identifier, or None/"" for
                baseline commands only
            template: Jinja template source, UTF-8 if given as bytes
            suppress_commands: Render commands and prologue as nothing,
                useful to preview the plain text

        Raises:
            ModelNotSupported: Unknown model identifier
            InvalidTemplateEncoding: Template is not valid UTF-8
        """
        self.model: Optional[Model] = resolve_model(model_name) if model_name else None
        self.template = _check_template(template)
        self.suppress_commands = suppress_commands
        self.encoder = Encoder()

    def __repr__(self) -> str:
        model = self.model.name if self.model else None
        return f"Printer(model={model!r}, suppress_commands={self.suppress_commands})"

    # ---- Commands ----

    def commands(self) -> dict[str, Command]:
        """Get every command a template may call, helpers included."""
        commands = dict(HELPERS)
        commands.update(self.model.commands if self.model is not None else COMMON_COMMANDS)
        return commands

    def bindings(self) -> dict[str, Binding]:
        """Get template callables for all commands."""
        return {
            name: Binding(name, command, suppressed=self.suppress_commands)
            for name, command in self.commands().items()
        }

    def init_commands(self) -> bytes:
        """Get the prologue: reset printer and select code page 852."""
        if self.suppress_commands:
            return b""
        return ESCPOSCommands.init() + ESCPOSCommands.cp852()

    def convert_newlines(self, text: str) -> str:
        """Apply the model's line ending rule, CRLF by default."""
        if self.model is not None and self.model.convert_newlines is not None:
            return self.model.convert_newlines(text)

        if "\n" not in text:
            return text
        return text.replace("\r\n", "\n").replace("\n", "\r\n")

    # ---- Templates ----

    def _environment(self, print_mode: bool) -> Environment:
        env = Environment(
            autoescape=False,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
            extensions=[PrintTextExtension] if print_mode else [],
        )
        if print_mode:
            env.convert_newlines = self.convert_newlines
            env.encode_text = self.encoder.encode_string
        env.globals.update(self.bindings())
        return env

    @staticmethod
    def _parse(env: Environment, source: str) -> Template:
        try:
            return env.from_string(source)
        except TemplateError as e:
            raise TemplateExecutionError(f"template parse: {e}") from e

    def new_template(self) -> Template:
        """
        Parse the template as Unicode text, without code page encoding or
        line ending conversion.
        """
        return self._parse(self._environment(print_mode=False), self.template)

    def new_print_template(self) -> Template:
        """
        Parse the template for the printer.

        Jinja works on the Unicode source; literal text and string literals
        are encoded to the code page token by token.
        """
        # Any character of the source, tags included, must be printable
        try:
            self.encoder.encode_string(self.template)
        except EncodingError as e:
            raise EncodingError(f"template encoding: {e}") from e
        source = self.template.replace("\r", CR_PLACEHOLDER)
        return self._parse(self._environment(print_mode=True), source)

    # ---- Rendering ----

    def _context(self, data: Any) -> dict:
        # Bindings are template globals; data keys never shadow them
        reserved = set(self.commands()) | {"data"}
        context = {}
        if isinstance(data, Mapping):
            context.update(
                (key, value) for key, value in data.items()
                if isinstance(key, str) and key not in reserved
            )
        context["data"] = data
        return context

    def render(self, data: Any = None) -> bytes:
        """
        Render the template with data into printer bytes.

        Mapping keys of data are available as template variables, the
        whole value as ``data``. Keys named like a command, or ``data``
        itself, are only reachable through ``data`` (``data.data``).

        Raises:
            EncodingError: Template or data text not representable in the
                code page
            TemplateExecutionError: Parse error, unknown name, bad command
                call
        """
        template = self.new_print_template()

        try:
            data = self.encoder.encode(data)
        except EncodingError as e:
            raise EncodingError(f"data encoding: {e}") from e

        try:
            body = template.render(self._context(data))
        except TemplateExecutionError:
            raise
        except (TemplateError, TypeError, ValueError, ArithmeticError) as e:
            raise TemplateExecutionError(f"template execute: {e}") from e

        output = self.init_commands() + self.encoder.to_bytes(body)
        logger.debug("Rendered %d bytes for %r", len(output), self)
        return output

    def write_to(self, sink: BinaryIO, data: Any = None) -> int:
        """
        Render and write the bytes to sink.

        Nothing is written when rendering fails.

        Returns:
            Number of bytes written
        """
        output = self.render(data)
        sink.write(output)
        return len(output)


def render_template(model_name: Optional[str], template: Union[str, bytes],
                    data: Any = None, suppress_commands: bool = False) -> bytes:
    """
    Render a template in one call.

    Args:
        model_name: Printer model, or None for baseline commands
        template: Template source
        data: Template data
        suppress_commands: Leave out all commands

    Returns:
        Printer bytes
    """
    printer = Printer(model_name, template, suppress_commands=suppress_commands)
    return printer.render(data)
