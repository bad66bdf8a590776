"""Dictionary source package — async loading of the dictionary artifact.

WHY: The player needs its phrase/word dictionary from a local file or a
static URL, and must keep working when that fails. This package keeps all
fetching and shape validation behind one loader class.

HOW: Uses httpx.AsyncClient for URLs and pathlib for files; jsonschema
guards the top-level shape. Parsed artifacts become AslDictionary objects.

RULES:
- All dictionary I/O goes through DictionaryLoader
- A failed load yields an empty dictionary, never an exception from load()
"""

from asl_player.api.client import DictionaryLoader, DictionaryUnavailableError
from asl_player.api.models import AslDictionary, LoadResult

__all__ = ["AslDictionary", "DictionaryLoader", "DictionaryUnavailableError", "LoadResult"]
