__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'cliexpr'
__author__ = 'Eiko Reishin (影皇嶺臣)'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

from .drivers import *
from .faults import *
from .grammar import *
from .mapping import *
from .naming import *
from .parser import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 0, 0, "final", 0, "")

__all__ = (
    "__path__",
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of the grammar (extractor, isolator, tokenizer)
__all__ += grammar.__all__  # type: ignore[attr-defined]
# Load the exposed API of the naming rules
__all__ += naming.__all__  # type: ignore[attr-defined]
# Load the exposed API of the case-insensitive mapping
__all__ += mapping.__all__  # type: ignore[attr-defined]
# Load the exposed API of the parser
__all__ += parser.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the driver registry
__all__ += drivers.__all__  # type: ignore[attr-defined]
