"""
cliexpr parser: from a templated command-line expression to a flat argument mapping.

Pipeline (data flows strictly forward)
1. extract   — the stripped body of the outermost "{{$ ... }}" template.
2. isolate   — nested expressions are swapped for base64 placeholders.
3. tokenize  — the body is cut into raw "--key[:value]" tokens.
4. split     — each token gives key text and value text; keys are normalized
               into PascalCase identifiers.
5. aggregate — tokens are grouped by case-insensitive key; one occurrence keeps
               its value, repeated occurrences give an ordered list.
6. reassemble — the mapping is serialized to JSON, placeholders are restored in
               the serialized text, and the JSON is parsed back; lists become
               compact JSON array strings.

Policy
- best effort: odd input never raises; it yields an empty or partial mapping.
- faults met on the way are collected on the Outcome (see analyze()) and
  logged at DEBUG; nothing is triggered from here.
- every call builds its own placeholder map; parsers hold no mutable state and
  can be shared between threads.

Quick example
    >>> arguments = parse("{{$ --Driver:ChromeDriver --Tag:a --tag:b --Nested:{{$ --x:1 }} }}")
    >>> arguments["driver"]
    'ChromeDriver'
    >>> arguments["TAG"]
    '["a","b"]'
    >>> arguments["nested"]
    '{{$ --x:1 }}'
"""
import json
import logging
from typing import NamedTuple

from .faults import (
    DuplicateIdentifierWarning,
    EmptyIdentifierWarning,
    EmptyTemplateWarning,
    FaultCode,
    MissingTemplateWarning,
    SerializationWarning,
    UnbalancedExpressionWarning,
)
from .grammar import CLOSER, DELIMITER, OPENER, SEPARATOR, Placeholders, extract_template, is_well_formed, tokenize
from .mapping import CaseInsensitiveDict
from .naming import group_key, pascalize, split_argument
from .utils import ordinal, pluralize

logger = logging.getLogger(__name__)


class Outcome(NamedTuple):
    """
    everything a single parse produced.

    fields
    - template: the extracted template body ("" when there was none).
    - expressions: the nested expressions isolated from the body.
    - tokens: raw argument tokens, placeholders restored.
    - arguments: the result mapping (CaseInsensitiveDict[str]).
    - faults: warnings collected on the way, in order.
    """
    template: str
    expressions: tuple
    tokens: tuple
    arguments: CaseInsensitiveDict
    faults: tuple


def aggregate(tokens, /, *, separator=SEPARATOR, faults=None):
    """
    group raw tokens by case-insensitive key and collapse each group into one value.

    rules
    - groups keep first-seen order; a group's identifier is pascalize() of its
      grouping key, the uppercased key text (so "--commandTimeout" is named
      "Commandtimeout").
    - one member: its value text, unprocessed; several members: the list of
      their value texts in token order; no member: "".
    - when two groups end up with the same identifier (compared
      case-insensitively, e.g. "--http-method" and "--httpmethod"), the later
      group replaces the earlier one.

    parameters
    - faults: optional list receiving DuplicateIdentifierWarning and
      EmptyIdentifierWarning instances.

    returns
    - dict[str, str | list[str]] keyed by identifier.
    """
    groups = {}
    for token in tokens:
        key, value = split_argument(token, separator)
        groups.setdefault(group_key(key), []).append(value)

    arguments = {}
    identifiers = {}

    for position, (key, values) in enumerate(groups.items(), 1):
        identifier = pascalize(key)

        if not identifier and faults is not None:
            faults.append(EmptyIdentifierWarning(
                "key %r of the %s argument has no identifier characters" % (key, ordinal(position)),
                title="empty identifier",
                code=FaultCode.EMPTY_IDENTIFIER,
                hint="use letters, digits or underscores in argument keys (e.g., --driver:ChromeDriver)",
                key=key,
                position=position,
            ))

        if (previous := identifiers.pop(identifier.casefold(), None)) is not None:
            del arguments[previous]
            if faults is not None:
                faults.append(DuplicateIdentifierWarning(
                    "key %r of the %s argument replaces the earlier argument %r" % (key, ordinal(position), previous),
                    title="duplicate identifier",
                    code=FaultCode.DUPLICATE_IDENTIFIER,
                    hint="spell repeated keys the same way to collect their values in one list",
                    key=key,
                    identifier=identifier,
                    position=position,
                ))

        match len(values):
            case 0:
                value = ""
            case 1:
                value = values[0]
            case _:
                value = list(values)

        identifiers[identifier.casefold()] = identifier
        arguments[identifier] = value

    return arguments


def reassemble(arguments, placeholders, /, *, faults=None):
    """
    restore nested expressions and build the final case-insensitive mapping.

    steps
    - serialize `arguments` (dict[str, str | list[str]]) to JSON text.
    - replace placeholders inside the serialized text by their expressions,
      JSON-escaped, so the expressions' own braces, colons and quotes are never
      read as structure.
    - parse the text back; list values become compact JSON array strings.

    any TypeError/ValueError from (de)serialization yields an empty mapping and,
    when `faults` is a list, a SerializationWarning.
    """
    try:
        document = placeholders.restore(json.dumps(arguments, ensure_ascii=False), escape=True)
        collection = json.loads(document)
        return CaseInsensitiveDict({
            key: value if isinstance(value, str) else json.dumps(value, ensure_ascii=False, separators=(",", ":"))
            for key, value in collection.items()
        })
    except (TypeError, ValueError) as error:
        logger.debug("argument serialization failed: %s", error)
        if faults is not None:
            faults.append(SerializationWarning(
                "arguments could not be serialized (%s)" % error,
                title="serialization failed",
                code=FaultCode.SERIALIZATION_FAILED,
                hint="nothing was recognized; check the expression for unusual characters",
            ))
        return CaseInsensitiveDict()


class ExpressionParser:
    """
    configurable parser for templated command-line expressions.

    grammar
    - opener/closer: template markers ("{{$" and "}}").
    - delimiter: argument prefix ("--").
    - separator: key/value separator (":").
    these are part of the wire contract with producers of templates; subclasses
    may override them for other dialects.

    operations
    - is_well_formed(text): structural check, never raises.
    - parse(text): the result mapping, never raises for odd input.
    - analyze(text): the full Outcome, faults included.
    """
    opener = OPENER
    closer = CLOSER
    delimiter = DELIMITER
    separator = SEPARATOR

    def is_well_formed(self, text, /):
        return is_well_formed(text, opener=self.opener, closer=self.closer)

    def parse(self, text, /):
        return self.analyze(text).arguments

    def analyze(self, text, /):
        """
        run the whole pipeline on text and report what each stage produced.

        None is read as the empty string; any other non-string raises TypeError.
        """
        if text is None:
            text = ""
        elif not isinstance(text, str):
            raise TypeError("expression must be a string, not %r" % type(text).__name__)

        faults = []

        if not self.is_well_formed(text):
            if text.strip():
                faults.append(MissingTemplateWarning(
                    "no %s ... %s template found in the expression" % (self.opener, self.closer),
                    title="missing template",
                    code=FaultCode.MISSING_TEMPLATE,
                    hint="wrap the arguments in a template (e.g., %s %sdriver:ChromeDriver %s)" % (
                        self.opener, self.delimiter, self.closer
                    ),
                ))
            logger.debug("expression holds no template (%s)", pluralize(len(text), "character"))
            return Outcome("", (), (), CaseInsensitiveDict(), tuple(faults))

        template = extract_template(text, opener=self.opener, closer=self.closer)

        placeholders = Placeholders()
        isolated = placeholders.isolate(template, opener=self.opener, closer=self.closer)
        if not placeholders.balanced:
            faults.append(UnbalancedExpressionWarning(
                "a nested %s expression is never closed" % self.opener,
                title="unbalanced expression",
                code=FaultCode.UNBALANCED_EXPRESSION,
                hint="close every nested %s with %s; its arguments were read as top-level ones" % (
                    self.opener, self.closer
                ),
            ))

        tokens = tokenize(isolated, delimiter=self.delimiter)
        logger.debug(
            "template of %s: %s, %s",
            pluralize(len(template), "character"),
            pluralize(len(placeholders), "nested expression"),
            pluralize(len(tokens), "token"),
        )

        if not tokens:
            faults.append(EmptyTemplateWarning(
                "the template holds no %skey[%svalue] arguments" % (self.delimiter, self.separator),
                title="empty template",
                code=FaultCode.EMPTY_TEMPLATE,
                hint="add arguments inside the template (e.g., %sdriver%sChromeDriver)" % (
                    self.delimiter, self.separator
                ),
            ))

        arguments = reassemble(
            aggregate(tokens, separator=self.separator, faults=faults),
            placeholders,
            faults=faults,
        )

        for fault in faults:
            logger.debug("%s: %s", fault.code.name.lower(), fault.message)

        return Outcome(
            template,
            tuple(placeholders),
            tuple(placeholders.restore(token) for token in tokens),
            arguments,
            tuple(faults),
        )


_parser = ExpressionParser()


def parse(text, /):
    """
    parse a templated command-line expression into a case-insensitive mapping.

    best effort: input without a template, or with an empty one, gives an
    empty mapping; nothing is raised for odd input.
    """
    return _parser.parse(text)


def analyze(text, /):
    """
    like parse(), but return the full Outcome (template, tokens, faults, ...).
    """
    return _parser.analyze(text)


__all__ = (
    # Types
    "ExpressionParser",
    "Outcome",

    # Functions
    "aggregate",
    "reassemble",
    "parse",
    "analyze",
)
