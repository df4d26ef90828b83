"""
Argument key handling: key/value splitting, grouping keys and PascalCase identifiers.

pascalize() turns free-form key text into a canonical identifier by applying,
in order:

    1. whitespace runs become a single underscore separator
    2. every character outside [A-Za-z0-9_] is dropped
    3. the text is split on underscores, empty words are dropped
    4. a leading lowercase letter is uppercased               (name  -> Name)
    5. an acronym tail is lowercased after its first letter    (ABC   -> Abc)
    6. a lowercase letter following a digit is uppercased      (Ab9cd -> Ab9Cd)
    7. interior uppercase runs followed by an uppercase+lowercase
       pair or a digit are lowercased                          (ABCDef -> AbcDef)
    8. the words are concatenated

Steps 4-7 are re-applied to the concatenated identifier until it is stable
(single-letter words such as "x y" -> "XY" -> "Xy" need a second round), so
pascalize(pascalize(text)) == pascalize(text).

    >>> pascalize("HTTP Method")
    'HttpMethod'
    >>> pascalize("app9Name")
    'App9Name'
"""
import re

from .grammar import SEPARATOR

_WHITESPACE = re.compile(r"\s+")
_INVALID = re.compile(r"[^_a-zA-Z0-9]")
_LEADING_LOWER = re.compile(r"^[a-z]")
_LOWER_AFTER_DIGIT = re.compile(r"(?<=[0-9])[a-z]")
_INTERIOR_UPPER = re.compile(r"(?<=[A-Z])[A-Z]+?(?=[A-Z][a-z]|[0-9])")

_UPPER = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZ")
_UPPER_OR_DIGIT = _UPPER | frozenset("0123456789")

# word rules settle in two rounds; the bound only caps pathological input
_ROUNDS = 8


def _lower_acronym_tail(word):
    """
    lowercase the trailing [A-Z0-9] run of a word, after the first uppercase letter that starts it.

    equivalent to substituting (?<=[A-Z])[A-Z0-9]+$ with its lowercase, without
    the quadratic backtracking that pattern has on long uppercase words.
    """
    tail = len(word)
    while tail and word[tail - 1] in _UPPER_OR_DIGIT:
        tail -= 1
    for index in range(tail, len(word) - 1):
        if word[index] in _UPPER:
            return word[:index + 1] + word[index + 1:].lower()
    return word


def _pascalize_word(word):
    word = _LEADING_LOWER.sub(lambda match: match[0].upper(), word)
    word = _lower_acronym_tail(word)
    word = _LOWER_AFTER_DIGIT.sub(lambda match: match[0].upper(), word)
    return _INTERIOR_UPPER.sub(lambda match: match[0].lower(), word)


def pascalize(text, /):
    """
    convert free-form key text into a PascalCase identifier (see module docstring).

    returns "" when nothing of the identifier alphabet survives.
    """
    if not isinstance(text, str):
        raise TypeError("pascalize() argument must be a string")
    text = _INVALID.sub("", _WHITESPACE.sub("_", text))
    identifier = "".join(_pascalize_word(word) for word in text.split("_") if word)

    for _ in range(_ROUNDS):
        if (stable := _pascalize_word(identifier)) == identifier:
            break
        identifier = stable
    return identifier


def split_argument(token, /, separator=SEPARATOR):
    """
    split a raw argument token into (key, value) at the first separator.

    the value is returned unprocessed; it is "" when the token has no separator.
    """
    key, _, value = token.partition(separator)
    return key, value


def group_key(key, /):
    """
    the case-insensitive grouping key of raw key text (stripped, uppercased).
    """
    return key.strip().upper()


__all__ = (
    "pascalize",
    "split_argument",
    "group_key",
)
