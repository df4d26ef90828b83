"""
Case-insensitive string-keyed mapping.

Every mapping handed out by the parser is a CaseInsensitiveDict: lookups,
membership, deletion and equality compare keys by str.casefold(), while
iteration yields the keys with the casing of their most recent assignment.

    >>> arguments = CaseInsensitiveDict({"Driver": "ChromeDriver"})
    >>> arguments["driver"]
    'ChromeDriver'
    >>> arguments["DRIVER"] = "Firefox"
    >>> list(arguments)
    ['DRIVER']
"""
from collections.abc import Mapping, MutableMapping


class CaseInsensitiveDict(MutableMapping):
    """
    a MutableMapping[str, V] whose keys compare case-insensitively.

    storage
    - backing dict maps casefolded key -> (original key, value).
    - insertion order is kept; re-assigning an existing key keeps its position
      but adopts the new casing.

    equality
    - equal to any Mapping with the same casefolded keys and equal values.
    """
    __slots__ = ("_store",)

    def __init__(self, data=None, /, **kwargs):
        self._store = {}
        if data is not None:
            self.update(data)
        self.update(kwargs)

    @staticmethod
    def _fold(key):
        if not isinstance(key, str):
            raise TypeError(f"keys must be strings, not {type(key).__name__!r}")
        return key.casefold()

    def __setitem__(self, key, value):
        self._store[self._fold(key)] = (key, value)

    def __getitem__(self, key):
        return self._store[self._fold(key)][1]

    def __delitem__(self, key):
        del self._store[self._fold(key)]

    def __iter__(self):
        return (key for key, _ in self._store.values())

    def __len__(self):
        return len(self._store)

    def __contains__(self, key):
        return isinstance(key, str) and key.casefold() in self._store

    def __eq__(self, other):
        if not isinstance(other, Mapping):
            return NotImplemented
        try:
            other = CaseInsensitiveDict(other)
        except TypeError:
            return False
        return dict(self.lower_items()) == dict(other.lower_items())

    __hash__ = None

    def lower_items(self):
        """
        iterate (casefolded key, value) pairs.
        """
        return ((folded, pair[1]) for folded, pair in self._store.items())

    def copy(self):
        return CaseInsensitiveDict(self._store.values())

    def __repr__(self):
        return f"{type(self).__name__}({dict(self.items())!r})"

    def __rich_repr__(self):
        yield from self.items()


__all__ = ("CaseInsensitiveDict",)
