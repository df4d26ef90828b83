r"""
cliexpr grammar: template extraction, nested-expression isolation, tokenizing.

Wire grammar
- a template is delimited by the open marker "{{$" and the close marker "}}".
- inside it, arguments are "--key" or "--key:value" units; a value runs until the
  next "--" that follows whitespace and precedes a key-like character
  (word characters or one of ", / . $ *"), or until the end of the template.
- a value may itself hold a whole template (a nested expression); nested
  expressions are opaque and travel through the pipeline as placeholders.

Scanning
- all scans are linear: markers are located with str.find/str.rfind, nested
  expressions are cut out by their spans, placeholders are found by their
  frame, and the argument boundary regex only starts at the beginning of a
  whitespace run.

Quick example
    >>> extract_template("run {{$ --driver:ChromeDriver --tag:{{$ --x:1 }} }} now")
    '--driver:ChromeDriver --tag:{{$ --x:1 }}'
    >>> placeholders = Placeholders()
    >>> isolated = placeholders.isolate('--driver:ChromeDriver --tag:{{$ --x:1 }}')
    >>> tokenize(isolated)
    ['driver:ChromeDriver', 'tag:\ue000e3skIC0teDoxIH19\ue001']
"""
import base64
import functools
import json
import re
from collections.abc import Mapping

OPENER = "{{$"
CLOSER = "}}"
DELIMITER = "--"
SEPARATOR = ":"

# characters allowed right after an argument delimiter
KEY_CHARACTERS = r"[\w,/.$*]"

# placeholder frame (private-use code points)
FRAME_OPEN = "\ue000"
FRAME_CLOSE = "\ue001"

_PLACEHOLDER = re.compile(FRAME_OPEN + r"[A-Za-z0-9+/]*=*" + FRAME_CLOSE)


def _locate(text, opener, closer):
    """
    locate the outermost template: first opener, last closer after it.

    returns
    - (start, end) slice bounds of the template body, or None when absent.
    """
    if (start := text.find(opener)) == -1:
        return None
    start += len(opener)
    if (end := text.rfind(closer, start)) == -1:
        return None
    return start, end


def is_well_formed(text, /, *, opener=OPENER, closer=CLOSER):
    """
    tell whether text holds a template (an opener followed, anywhere later, by a closer).

    None and non-string input are never well-formed; this function never raises.
    """
    if not isinstance(text, str):
        return False
    return _locate(text, opener, closer) is not None


def extract_template(text, /, *, opener=OPENER, closer=CLOSER):
    """
    return the stripped body of the outermost template, or "" when there is none.

    the body runs from the first opener to the last closer after it, so nested
    expressions stay inside it; newlines are ordinary characters.
    """
    if not isinstance(text, str):
        return ""
    if (bounds := _locate(text, opener, closer)) is None:
        return ""
    start, end = bounds
    return text[start:end].strip()


def _scan(template, opener, closer):
    """
    locate every top-level nested expression of a template body.

    returns
    - (spans, balanced): (start, end) slice bounds in order of appearance, and
      whether every opener found its closer.
    """
    spans = []
    depth = 0
    start = index = 0
    closing = -1
    opening = template.find(opener)

    while opening != -1 or depth:
        if not depth:
            start, depth = opening, 1
            index = opening + len(opener)
            opening = template.find(opener, index)
            continue

        if closing < index:
            closing = template.find(closer, index)
        if closing == -1:
            return spans, False

        if opening != -1 and opening < closing:
            depth += 1
            index = opening + len(opener)
            opening = template.find(opener, index)
            continue

        depth -= 1
        index = closing + len(closer)
        if opening != -1 and opening < index:
            opening = template.find(opener, index)

        if not depth:
            spans.append((start, index))

    return spans, True


def find_expressions(template, /, *, opener=OPENER, closer=CLOSER):
    """
    find the top-level nested expressions of a template body.

    rules
    - an expression starts at an opener and ends at the closer that balances it
      (openers met on the way raise the depth, closers lower it).
    - expressions are returned in first-seen order, deduplicated by exact text.
    - an opener left without its balancing closer starts no expression.

    returns
    - (expressions, balanced): the list of expression texts and whether every
      opener found its closer.
    """
    spans, balanced = _scan(template, opener, closer)
    return list(dict.fromkeys(template[start:end] for start, end in spans)), balanced


class Placeholders(Mapping):
    """
    per-call bidirectional map between nested expressions and their placeholders.

    encoding
    - a placeholder is the base64 text of the expression's UTF-8 bytes, framed
      by the private-use characters U+E000 and U+E001. The same expression
      always gets the same placeholder (content-addressed).
    - neither base64 text nor the frame holds whitespace, "-" or ":", so the
      tokenizer and the key/value splitter never cut through a placeholder.
    - the frame lets restore() find placeholders in one scan, whatever the
      number of expressions.

    mapping view
    - iterating yields expressions; self[expression] is its placeholder.
    """
    __slots__ = ("_forward", "_backward", "_balanced")

    def __init__(self, expressions=(), /):
        self._forward = {}
        self._backward = {}
        self._balanced = True
        for expression in expressions:
            self.add(expression)

    @staticmethod
    def encode(expression, /):
        return base64.b64encode(expression.encode("utf-8", "surrogatepass")).decode("ascii")

    @property
    def balanced(self):
        """
        whether the last isolate() call found a closer for every opener.
        """
        return self._balanced

    def add(self, expression, /):
        if not isinstance(expression, str):
            raise TypeError("nested expressions must be strings")
        if not expression:
            raise ValueError("nested expressions cannot be empty")
        if (placeholder := self._forward.get(expression)) is None:
            placeholder = FRAME_OPEN + self.encode(expression) + FRAME_CLOSE
            self._forward[expression] = placeholder
            self._backward[placeholder] = expression
        return placeholder

    def __getitem__(self, expression):
        return self._forward[expression]

    def __iter__(self):
        return iter(self._forward)

    def __len__(self):
        return len(self._forward)

    def expression(self, placeholder, /):
        """
        reverse lookup: the expression text behind a placeholder.
        """
        return self._backward[placeholder]

    def isolate(self, template, /, *, opener=OPENER, closer=CLOSER):
        """
        register the template's nested expressions and replace each one by its placeholder.
        """
        spans, self._balanced = _scan(template, opener, closer)
        pieces = []
        position = 0
        for start, end in spans:
            pieces.append(template[position:start])
            pieces.append(self.add(template[start:end]))
            position = end
        pieces.append(template[position:])
        return "".join(pieces)

    def restore(self, text, /, *, escape=False):
        """
        replace every placeholder in text by its expression, in a single pass.

        framed text that is not a known placeholder is left as is.

        parameters
        - escape: when True the expression is JSON-string escaped first, for
          splicing into already serialized JSON text.
        """
        if not self._backward:
            return text

        def replacement(match):
            if (expression := self._backward.get(match[0])) is None:
                return match[0]
            return _escape(expression) if escape else expression

        return _PLACEHOLDER.sub(replacement, text)

    def __repr__(self):
        return f"{type(self).__name__}({list(self._forward)!r})"


def _escape(expression):
    # json.dumps quotes the string; keep only the escaped body
    return json.dumps(expression, ensure_ascii=False)[1:-1]


@functools.cache
def _boundary(delimiter):
    # anchored at the start of a whitespace run: each run is scanned once
    return re.compile(r"(?<!\s)\s+" + re.escape(delimiter) + r"(?=" + KEY_CHARACTERS + "|" + FRAME_OPEN + r")")


def tokenize(template, /, *, delimiter=DELIMITER):
    """
    split a (placeholder-substituted) template body into raw argument tokens.

    rules
    - the first token starts right after the first delimiter, wherever it is.
    - each next token starts after a delimiter preceded by whitespace and
      followed by a key-like character or a placeholder; the previous token
      ends before that whitespace.
    - tokens are stripped; empty tokens are dropped; order is preserved.

    values are not quoted or escaped: a value simply runs until the next boundary.
    """
    if (start := template.find(delimiter)) == -1:
        return []
    start += len(delimiter)

    tokens = []
    for match in _boundary(delimiter).finditer(template, start):
        tokens.append(template[start:match.start()])
        start = match.end()
    tokens.append(template[start:])

    return [token for token in map(str.strip, tokens) if token]


__all__ = (
    # Constants
    "OPENER",
    "CLOSER",
    "DELIMITER",
    "SEPARATOR",
    "KEY_CHARACTERS",
    "FRAME_OPEN",
    "FRAME_CLOSE",

    # Functions
    "is_well_formed",
    "extract_template",
    "find_expressions",
    "tokenize",

    # Types
    "Placeholders",
)
