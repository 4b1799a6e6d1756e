"""
ESC/POS Command Table.

Commands are named, described byte builders that templates can call.
Every command declares the shape of its arguments so calls from a
template are checked before any bytes are produced.

Byte sequences follow the Epson ESC/POS Application Programming Guide.
Command output is final device bytes and is never re-encoded.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, Optional, Union

from .errors import CommandError

ESC = 0x1B
GS = 0x1D


class Arg(Enum):
    """Argument shapes accepted by commands."""

    BYTE = "byte"        # 0..255
    INT16 = "int16"      # -32768..32767, sent little-endian
    STRING = "string"
    BYTES = "...byte"    # Variadic, only valid as the last parameter


_INT_RANGES = {
    Arg.BYTE: (0, 0xFF),
    Arg.BYTES: (0, 0xFF),
    Arg.INT16: (-0x8000, 0x7FFF),
}


def _check_arg(shape: Arg, value):
    """Validate a single argument against its declared shape."""
    if shape is Arg.STRING:
        if not isinstance(value, str):
            raise CommandError(f"expected string, got {type(value).__name__}")
        return value

    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int):
        raise CommandError(f"expected {shape.value}, got {type(value).__name__}")
    low, high = _INT_RANGES[shape]
    if not low <= value <= high:
        raise CommandError(f"{shape.value} out of range: {value}")
    return value


@dataclass(frozen=True)
class Command:
    """A named printer command as seen from templates.

    Attributes:
        description: Human readable help text
        function: Builder returning the raw device bytes
        params: Declared argument shapes, empty for toggles
    """

    description: str
    function: Callable[..., bytes]
    params: tuple = ()

    @property
    def signature(self) -> str:
        return "(" + ", ".join(p.value for p in self.params) + ")"

    def invoke(self, *args) -> bytes:
        """
        Check arguments against the declared shapes and build the bytes.

        Raises:
            CommandError: On wrong arity, wrong argument type, or a value
                the command rejects
        """
        params = self.params
        variadic = bool(params) and params[-1] is Arg.BYTES
        fixed = params[:-1] if variadic else params

        if len(args) < len(fixed) or (not variadic and len(args) > len(fixed)):
            raise CommandError(
                f"wrong number of args: want {self.signature}, got {len(args)}"
            )

        checked = [_check_arg(shape, value) for shape, value in zip(fixed, args)]
        if variadic:
            checked.extend(_check_arg(Arg.BYTES, value) for value in args[len(fixed):])
        return self.function(*checked)


@dataclass(frozen=True)
class Remove:
    """Table delta dropping a command."""

    name: str


@dataclass(frozen=True)
class Add:
    """Table delta adding or replacing a command."""

    name: str
    command: Command


Delta = Union[Remove, Add]


class CommandTable(Mapping):
    """
    Immutable mapping from command name to Command.

    Model specific tables are derived with specialize(), which copies
    the table and applies deltas in order. The source table is never
    modified.
    """

    def __init__(self, commands: Optional[Mapping[str, Command]] = None):
        self._commands = dict(commands or {})

    def __getitem__(self, name: str) -> Command:
        return self._commands[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._commands)

    def __len__(self) -> int:
        return len(self._commands)

    def __repr__(self) -> str:
        return f"CommandTable({sorted(self._commands)})"

    def lookup(self, name: str) -> Optional[Command]:
        """Get a command by name, or None if the table lacks it."""
        return self._commands.get(name)

    def specialize(self, *deltas: Delta) -> "CommandTable":
        """Return a new table with deltas applied in order (last write wins)."""
        commands = dict(self._commands)
        for delta in deltas:
            if isinstance(delta, Remove):
                commands.pop(delta.name, None)
            elif isinstance(delta, Add):
                commands[delta.name] = delta.command
            else:
                raise TypeError(f"Unknown table delta: {delta!r}")
        return CommandTable(commands)


class ESCPOSCommands:
    """
    ESC/POS byte builders.

    Parameterized builders validate their ranges and raise CommandError.
    """

    # ---- Setup ----

    @staticmethod
    def init() -> bytes:
        """Initialize printer. ESC @"""
        return bytes([ESC, 0x40])

    @staticmethod
    def code_page(n: int) -> bytes:
        """Select character code table. ESC t n"""
        return bytes([ESC, 0x74, n])

    @staticmethod
    def cp852() -> bytes:
        """Select PC852 (Latin-2), page 18."""
        return ESCPOSCommands.code_page(0x12)

    # ---- Paper movement ----

    @staticmethod
    def cr() -> bytes:
        """Print and carriage return."""
        return bytes([0x0D])

    @staticmethod
    def lf() -> bytes:
        """Line feed."""
        return bytes([0x0A])

    @staticmethod
    def print_and_feed(n: int) -> bytes:
        """Print and feed n lines. ESC d n"""
        return bytes([ESC, 0x64, n])

    # ---- Character style ----

    @staticmethod
    def bold(on: bool = True) -> bytes:
        """Turn emphasized mode on/off. ESC E n"""
        return bytes([ESC, 0x45, 1 if on else 0])

    @staticmethod
    def double_strike(on: bool = True) -> bytes:
        """Turn double-strike (double size) mode on/off. ESC G n"""
        return bytes([ESC, 0x47, 1 if on else 0])

    @staticmethod
    def underline(mode: int) -> bytes:
        """
        Specify/cancel underline mode. ESC - n

        Args:
            mode: 0=cancel, 1=one dot width, 2=two dot width
        """
        if mode > 2:
            raise CommandError("unknown underline mode")
        return bytes([ESC, 0x2D, mode])

    @staticmethod
    def font(n: int) -> bytes:
        """
        Select character font. ESC M n

        Args:
            n: 0=font A, 1=font B
        """
        if n > 1:
            raise CommandError("unknown font type")
        return bytes([ESC, 0x4D, n])

    @staticmethod
    def print_mode(options: str) -> bytes:
        """
        Select print modes from a string of option characters. ESC ! n

        Options:
            A - font A
            B - font B
            u - underlined
            b - bold
            w - double width
            h - double height

        Exactly one font must be given and no option may repeat.
        """
        used = set()
        mode = 0
        for option in options:
            if option in used:
                raise CommandError(f"duplicate '{option}'")
            if option == "A":
                if "B" in used:
                    raise CommandError("already selected font B")
            elif option == "B":
                if "A" in used:
                    raise CommandError("already selected font A")
                mode |= 1
            elif option == "b":
                mode |= 1 << 3
            elif option == "h":
                mode |= 1 << 4
            elif option == "w":
                mode |= 1 << 5
            elif option == "u":
                mode |= 1 << 7
            else:
                raise CommandError(f"unknown '{option}'")
            used.add(option)

        if "A" not in used and "B" not in used:
            raise CommandError("no font selected")
        return bytes([ESC, 0x21, mode])

    # ---- Layout ----

    @staticmethod
    def align(mode: int) -> bytes:
        """
        Select justification, effective at the beginning of a line. ESC a n

        Args:
            mode: 0=left, 1=center, 2=right
        """
        if mode > 2:
            raise CommandError("unknown align mode")
        return bytes([ESC, 0x61, mode])

    @staticmethod
    def margin_left(dots: int) -> bytes:
        """Set left margin. GS L nL nH"""
        return bytes([GS, 0x4C]) + dots.to_bytes(2, "little", signed=True)

    @staticmethod
    def print_region_width(dots: int) -> bytes:
        """Set print area width. GS W nL nH"""
        return bytes([GS, 0x57]) + dots.to_bytes(2, "little", signed=True)


_C = ESCPOSCommands

# Commands available on every model before specialization
COMMON_COMMANDS = CommandTable({
    "init": Command("Initialize printer", _C.init),
    "cr": Command("Print and carriage return", _C.cr),
    "lf": Command("Line feed", _C.lf),
    "pf": Command("(n byte) Print and feed n lines", _C.print_and_feed, (Arg.BYTE,)),
    "b": Command("Print following text with bold", lambda: _C.bold(True)),
    "nob": Command("Print following text without bold", lambda: _C.bold(False)),
    "ds": Command("Print following text with double size", lambda: _C.double_strike(True)),
    "nods": Command("Print following text with normal size", lambda: _C.double_strike(False)),
    "underline": Command(
        "(n byte = 0..2) Set underline mode (0:none, 1:one dot, 2:two dot)",
        _C.underline, (Arg.BYTE,),
    ),
    "u": Command("Print following text with underline 1 dot", lambda: _C.underline(1)),
    "u2": Command("Print following text with underline 2 dot", lambda: _C.underline(2)),
    "nou": Command("Print following text without underline", lambda: _C.underline(0)),
    "align": Command(
        "(n byte = 0..2) Align following text (0:left, 1:center, 2:right)",
        _C.align, (Arg.BYTE,),
    ),
    "left": Command("Print following text aligned left", lambda: _C.align(0)),
    "center": Command("Print following text aligned center", lambda: _C.align(1)),
    "right": Command("Print following text aligned right", lambda: _C.align(2)),
    "selectFont": Command("(n byte = 0..1) Select font (0:font A, 1:font B)", _C.font, (Arg.BYTE,)),
    "fontA": Command("Print following text using font A", lambda: _C.font(0)),
    "fontB": Command("Print following text using font B", lambda: _C.font(1)),
    "font": Command(
        """(string = [ABubwh]) Specify print mode using string options.
    Options:
     A - font A
     B - font B
     u - underlined
     b - bold
     w - double width
     h - double height""",
        _C.print_mode, (Arg.STRING,),
    ),
    "marginLeft": Command("(int16) Set left margin", _C.margin_left, (Arg.INT16,)),
    "printRegionWidth": Command("(int16) Set print region width", _C.print_region_width, (Arg.INT16,)),
})
