"""
cliexpr faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every issue the package
  can report. Codes are grouped by domain to keep logs/searches predictable.
- ParseError / ParseWarning: base types that carry message + options and know
  how to render themselves with rich (plain lines or a panel, colored or not).
- trigger(): central entry point to surface any fault (respecting shell/deferred/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

Policy
- The parse pipeline never raises for odd input. It degrades to an empty or
  partial mapping and records warnings on its outcome; callers decide whether
  and how to trigger them (the command-line front end prints them).
- Errors are reserved for the driver layer, where a missing driver or a bad
  setting is the caller's concern.

Integration
- In non-shell mode, errors are raised and warnings go through warnings.warn.
- In shell mode, both are rendered on the stderr console; errors exit with
  status 1 unless deferred.
"""
import inspect
import sys
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping (by high-level domain)
    - drivers (111xx)
      • UNKNOWN_DRIVER, INVALID_SETTING, MISSING_CONSTRUCTOR
    - templates (121xx)
      • MISSING_TEMPLATE, EMPTY_TEMPLATE, UNBALANCED_EXPRESSION
    - arguments (122xx)
      • DUPLICATE_IDENTIFIER, EMPTY_IDENTIFIER
    - serialization (123xx)
      • SERIALIZATION_FAILED

    the host application can remap codes to labels through a __codes__ mapping
    in __main__ (see normalize()).
    """
    # --- driver errors (11xxx) ---
    UNKNOWN_DRIVER          = 11101
    INVALID_SETTING         = 11102
    MISSING_CONSTRUCTOR     = 11103

    # --- template warnings (12xxx) ---
    MISSING_TEMPLATE        = 12101
    EMPTY_TEMPLATE          = 12102
    UNBALANCED_EXPRESSION   = 12103

    # --- argument warnings (12xxx) ---
    DUPLICATE_IDENTIFIER    = 12201
    EMPTY_IDENTIFIER        = 12202

    # --- serialization warnings (12xxx) ---
    SERIALIZATION_FAILED    = 12301

    def normalize(self):
        """
        return a host-normalized string for this code.

        when __main__ defines no __codes__ mapping (or has no entry for this
        code), the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette, title_style, message_style):
    """
    shared rich renderer for errors and warnings.

    options read from fault.options (all optional)
    - prog: program label in the header (defaults to "cliexpr").
    - code: FaultCode shown next to the program label.
    - title: short lowercase title.
    - hint: one actionable sentence shown after an arrow.
    - colorful: apply styles (default True).
    - fancy: wrap in a Panel (default False).
    """
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", True)

    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if isinstance(fragment, Text):
            return fragment if colorful else Text(fragment.plain)
        return Text(str(fragment), style if colorful else "")

    prog = text(options.get("prog", getattr(main, "__prog__", "cliexpr")), styler("prog-name"))

    parts = ["[ ", prog]
    if isinstance(code := options.get("code"), FaultCode):
        parts += [" — ", text(code.normalize(), styler("code"))]
    if title := options.get("title"):
        parts += [" | ", text(title.title(), styler(title_style))]
    header = Text.assemble(*parts, " ]")

    message = text(coalesce(fault.message, ""), styler(message_style))
    renders = [message]
    if hint := options.get("hint"):
        renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

    if options.get("fancy", False):
        return Panel(Group(*renders), title=header, title_align="left")

    return Group(header, *renders)


class ParseError(Exception):
    """
    base error carrying a message and read-only options (code, title, hint, ...).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    def __rich__(self):
        return _render(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        }, "error-title", "error-message")

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        if self.options.get("deferred", False):
            return
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnknownDriverError(ParseError): ...
class InvalidSettingError(ParseError): ...
class MissingConstructorError(ParseError): ...


class ParseWarning(Warning):
    """
    base warning carrying a message and read-only options (code, title, hint, ...).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    def __rich__(self):
        return _render(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "warning-title": "bold #FFC2E0",  # softer pinky title for warnings

            # body
            "warning-message": "#D6D6DE",  # slightly lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
        }, "warning-title", "warning-message")

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class MissingTemplateWarning(ParseWarning): ...
class EmptyTemplateWarning(ParseWarning): ...
class UnbalancedExpressionWarning(ParseWarning): ...
class DuplicateIdentifierWarning(ParseWarning): ...
class EmptyIdentifierWarning(ParseWarning): ...
class SerializationWarning(ParseWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via the rich console; otherwise, errors
      are raised and warnings are emitted.

    typical options
    - prog, shell, fancy, colorful, deferred, plus any overrides of title/code/hint.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings. when
    not found, returns None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "ParseError",
    "UnknownDriverError",
    "InvalidSettingError",
    "MissingConstructorError",
    "ParseWarning",
    "MissingTemplateWarning",
    "EmptyTemplateWarning",
    "UnbalancedExpressionWarning",
    "DuplicateIdentifierWarning",
    "EmptyIdentifierWarning",
    "SerializationWarning",
    "FaultCode",
    "trigger",
    "getdoc",
)
