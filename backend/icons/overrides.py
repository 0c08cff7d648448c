"""
Curated icon overrides.

Maps a normalized image/container key to a trusted icon URL. Loaded once at
startup; edits to the file need a restart.
"""

import json
import logging
import os
from types import MappingProxyType
from typing import Iterator, Mapping, Optional

logger = logging.getLogger(__name__)

# Shipped as package data beside this module
BUNDLED_MAPPINGS_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'custom_icon_mappings.json')


class IconOverrideTable(Mapping):
    """Immutable key -> icon URL mapping"""

    def __init__(self, mappings: Optional[Mapping[str, str]] = None):
        cleaned = {}
        for key, url in (mappings or {}).items():
            if not isinstance(key, str) or not isinstance(url, str):
                logger.warning(f"Ignoring non-string icon override entry: {key!r}")
                continue
            key = key.strip().lower()
            url = url.strip()
            if key and url:
                cleaned[key] = url
        self._mappings = MappingProxyType(cleaned)
        self._urls = frozenset(cleaned.values())

    def __getitem__(self, key: str) -> str:
        return self._mappings[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._mappings)

    def __len__(self) -> int:
        return len(self._mappings)

    def __repr__(self) -> str:
        return f"IconOverrideTable({len(self)} entries)"

    def has_url(self, url: str) -> bool:
        """True if the URL is one of the curated override targets"""
        return url in self._urls

    @classmethod
    def from_file(cls, path: str) -> 'IconOverrideTable':
        """
        Load overrides from a JSON object file.

        A missing or unreadable file yields an empty table; icon lookups then
        go straight to the catalog.
        """
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.warning(f"Icon override file not found: {path}")
            return cls()
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load icon overrides from {path}: {e}")
            return cls()

        if not isinstance(data, dict):
            logger.error(f"Icon override file {path} must contain a JSON object")
            return cls()

        table = cls(data)
        logger.info(f"Loaded {len(table)} icon overrides from {path}")
        return table
