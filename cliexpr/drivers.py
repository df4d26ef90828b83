"""
Driver settings and an explicit driver registry, fed by parsed expressions.

Scope
- DriverSettings: typed, frozen configuration built once from an argument
  mapping (for instance the result of parse()), validated at construction.
- DriverRegistry: explicit mapping from driver name to its local and remote
  constructors, populated at startup (register() or the @driver() decorator).
  There is no discovery and no hidden cache: a registration is visible to the
  very next lookup. create() picks the remote constructor for http:// and
  https:// binaries, the local one otherwise.
- Resolution: typed result of a lookup or a construction, carrying either a
  value or a fault; lookups never raise.

Quick example
    >>> registry = DriverRegistry()
    >>> @registry.driver("ChromeDriver")
    ... def chrome(settings):
    ...     return ("chrome", settings.driver_binaries)
    >>> settings = from_expression("{{$ --driver:chromedriver --driverBinaries:/opt/bin }}")
    >>> registry.create(settings).unwrap()
    ('chrome', '/opt/bin')
    >>> registry.create(DriverSettings(driver="ChromeDriver", driver_binaries="http://grid:4444/wd/hub")).ok
    False
"""
import difflib
import json
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from threading import Lock
from typing import Any, NamedTuple

from .faults import FaultCode, InvalidSettingError, MissingConstructorError, ParseError, UnknownDriverError
from .mapping import CaseInsensitiveDict
from .parser import parse

logger = logging.getLogger(__name__)

DEFAULT_DRIVER = "MicrosoftEdgeDriver"
DEFAULT_DRIVER_BINARIES = "."
DEFAULT_COMMAND_TIMEOUT = 60000

_REMOTE = re.compile(r"^https?://", re.IGNORECASE)


def _invalid(name, message, hint):
    return InvalidSettingError(
        "setting %r %s" % (name, message),
        title="invalid setting",
        code=FaultCode.INVALID_SETTING,
        hint=hint,
        setting=name,
    )


def _document(name, value, default):
    """
    read a structured setting: JSON text is decoded, other values pass through.
    """
    if value is None:
        return default
    if not isinstance(value, str):
        return value
    if not value.strip():
        return default
    try:
        return json.loads(value)
    except ValueError:
        raise _invalid(name, "is not valid JSON", "pass a JSON object or array, e.g. --%s:{\"key\":\"value\"}" % name) from None


def _timeout(value):
    if value is None or (isinstance(value, str) and not value.strip()):
        return DEFAULT_COMMAND_TIMEOUT
    if isinstance(value, bool):
        raise _invalid("commandTimeout", "must be an integer", "pass milliseconds, e.g. --commandTimeout:60000")
    try:
        timeout = int(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError, OverflowError):
        raise _invalid("commandTimeout", "must be an integer", "pass milliseconds, e.g. --commandTimeout:60000") from None
    if not isinstance(value, str) and timeout != value:
        raise _invalid("commandTimeout", "must be an integer", "pass milliseconds, e.g. --commandTimeout:60000")
    if timeout < 0:
        raise _invalid("commandTimeout", "cannot be negative", "pass milliseconds, e.g. --commandTimeout:60000")
    return timeout


@dataclass(frozen=True)
class DriverSettings:
    """
    typed driver configuration.

    fields
    - driver: registered driver name (case-insensitive), "MicrosoftEdgeDriver" by default.
    - driver_binaries: local path or remote endpoint URL, "." by default.
    - command_timeout: milliseconds, 60000 by default.
    - capabilities / first_match / service: decoded JSON documents.
    """
    driver: str = DEFAULT_DRIVER
    driver_binaries: str = DEFAULT_DRIVER_BINARIES
    command_timeout: int = DEFAULT_COMMAND_TIMEOUT
    capabilities: Any = field(default_factory=dict)
    first_match: Any = field(default_factory=list)
    service: Any = field(default_factory=dict)

    @property
    def is_remote(self):
        """
        whether driver_binaries points at a remote endpoint (http:// or https://).
        """
        return bool(_REMOTE.match(self.driver_binaries))

    @classmethod
    def from_mapping(cls, mapping, /):
        """
        build settings from an argument mapping, matching keys case-insensitively.

        recognized keys: driver, driverBinaries, commandTimeout, capabilities,
        firstMatch, service; other keys are ignored. empty values fall back to
        the defaults.

        raises
        - InvalidSettingError for a non-integer or negative timeout, or for
          structured settings that are not valid JSON.
        """
        arguments = CaseInsensitiveDict(mapping)

        def text(name, default):
            value = arguments.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                return default
            if not isinstance(value, str):
                raise _invalid(name, "must be a string", "pass it as text, e.g. --%s:value" % name)
            return value.strip()

        return cls(
            driver=text("driver", DEFAULT_DRIVER),
            driver_binaries=text("driverBinaries", DEFAULT_DRIVER_BINARIES),
            command_timeout=_timeout(arguments.get("commandTimeout")),
            capabilities=_document("capabilities", arguments.get("capabilities"), {}),
            first_match=_document("firstMatch", arguments.get("firstMatch"), []),
            service=_document("service", arguments.get("service"), {}),
        )


class Resolution(NamedTuple):
    """
    typed outcome of a registry operation: a value or a fault, never both.

    truthiness tells success from failure; unwrap() returns the value or raises
    the carried fault.
    """
    value: Any = None
    fault: ParseError | None = None

    @property
    def ok(self):
        return self.fault is None

    def __bool__(self):
        return self.ok

    def unwrap(self):
        if self.fault is not None:
            raise self.fault
        return self.value


class Constructors(NamedTuple):
    """
    the constructors registered under one driver name; either may be missing.

    - local: builds a driver around local binaries (driver_binaries is a path).
    - remote: builds a driver talking to a remote endpoint (driver_binaries is
      an http:// or https:// URL).
    """
    local: Callable | None = None
    remote: Callable | None = None


def _driver_name(name):
    if not isinstance(name, str):
        raise TypeError("driver name must be a string")
    elif not (name := name.strip()):
        raise ValueError("driver name cannot be empty")
    return name


def _constructor(factory):
    if factory is not None and not callable(factory):
        raise TypeError("driver constructor must be callable")
    return factory


class DriverRegistry:
    """
    explicit, case-insensitive registry of driver constructors.

    contract
    - a constructor is any callable taking a DriverSettings and returning the driver.
    - each name holds a local and a remote constructor; create() picks the
      remote one when settings.is_remote, the local one otherwise.
    - registering a name again replaces both of its constructors; the
      decorator replaces only the variant it decorates.
    - lookups and construction return a Resolution instead of raising.
    """

    def __init__(self, drivers=None, /):
        self._lock = Lock()
        self._drivers = CaseInsensitiveDict()
        for name, factory in (drivers or {}).items():
            self.register(name, factory)

    def register(self, name, local=None, /, *, remote=None):
        """
        register the local and/or remote constructor of a driver.

        returns the local constructor, or the remote one when no local is given.
        """
        name = _driver_name(name)
        constructors = Constructors(_constructor(local), _constructor(remote))
        if constructors == Constructors():
            raise TypeError("register() needs a local or a remote constructor")
        with self._lock:
            self._drivers[name] = constructors
        logger.debug("registered driver %r (%s)", name, ", ".join(
            variant for variant, factory in constructors._asdict().items() if factory is not None
        ))
        return local if local is not None else remote

    def unregister(self, name, /):
        with self._lock:
            del self._drivers[name]

    def driver(self, name, /, *, remote=False):
        """
        decorator form: @registry.driver("ChromeDriver") registers the local
        constructor, @registry.driver("ChromeDriver", remote=True) the remote one.
        """
        name = _driver_name(name)
        variant = "remote" if remote else "local"

        def wrapper(factory, /):
            if _constructor(factory) is None:
                raise TypeError("driver constructor must be callable")
            with self._lock:
                current = self._drivers.get(name, Constructors())
                self._drivers[name] = current._replace(**{variant: factory})
            logger.debug("registered driver %r (%s)", name, variant)
            return factory
        return wrapper

    def names(self):
        with self._lock:
            return tuple(self._drivers)

    def __contains__(self, name):
        return name in self._drivers

    def __len__(self):
        return len(self._drivers)

    def resolve(self, name, /, *, remote=False):
        """
        look a driver constructor up by name (case-insensitive) and variant.
        """
        with self._lock:
            constructors = self._drivers.get(name) if isinstance(name, str) else None
            names = tuple(self._drivers)

        if constructors is None:
            suggestions = difflib.get_close_matches(str(name), names, 1)
            if suggestions:
                hint = "did you mean %r? registered drivers: %s" % (suggestions[0], ", ".join(names))
            elif names:
                hint = "registered drivers: %s" % ", ".join(names)
            else:
                hint = "no driver is registered; register one with DriverRegistry.register()"

            logger.debug("driver %r is not registered", name)
            return Resolution(fault=UnknownDriverError(
                "unable to find the driver %r" % name,
                title="unknown driver",
                code=FaultCode.UNKNOWN_DRIVER,
                hint=hint,
                driver=name,
            ))

        variant = "remote" if remote else "local"
        if (factory := getattr(constructors, variant)) is not None:
            return Resolution(value=factory)

        logger.debug("driver %r has no %s constructor", name, variant)
        return Resolution(fault=MissingConstructorError(
            "the driver %r has no %s constructor" % (name, variant),
            title="missing constructor",
            code=FaultCode.MISSING_CONSTRUCTOR,
            hint="register one with @registry.driver(%r%s)" % (name, ", remote=True" if remote else ""),
            driver=name,
            variant=variant,
        ))

    def create(self, settings, /):
        """
        resolve settings.driver and call the constructor matching the settings'
        endpoint (remote for http:// and https:// binaries, local otherwise).

        errors raised by the constructor itself propagate to the caller.
        """
        if not (resolution := self.resolve(settings.driver, remote=settings.is_remote)):
            return resolution
        return Resolution(value=resolution.value(settings))


def from_expression(text, /):
    """
    parse a templated expression and build DriverSettings from it.
    """
    return DriverSettings.from_mapping(parse(text))


registry = DriverRegistry()
"""
process-wide registry, empty until the host application registers drivers at startup.
"""


__all__ = (
    # Types
    "DriverSettings",
    "DriverRegistry",
    "Constructors",
    "Resolution",

    # Functions
    "from_expression",

    # Constants
    "DEFAULT_DRIVER",
    "DEFAULT_DRIVER_BINARIES",
    "DEFAULT_COMMAND_TIMEOUT",
    "registry",
)
