"""Resource bundles — locale-scoped message templates loaded from JSON files.

Each bundle directory holds ``messages.json`` (root, any locale) and
``messages_<locale>.json`` files such as ``messages_pt_BR.json``. Nested
objects are flattened with dots, so these two files are equivalent::

    {"constraints": {"size": "..."}}
    {"constraints.size": "..."}

Lookup for ``pt_BR`` walks ``pt_BR -> pt -> default locale chain -> root``.
Directories listed later override earlier ones.
"""

import json
from collections import ChainMap
from pathlib import Path
from typing import Iterable, Optional, Union

import structlog

logger = structlog.get_logger()

BUILTIN_BUNDLE_DIR = Path(__file__).parent / "bundles"
BUNDLE_BASENAME = "messages"


def normalize_locale(locale: Optional[str]) -> str:
    """'pt-br' -> 'pt_BR', 'EN' -> 'en', None -> ''."""
    if not locale:
        return ""
    parts = locale.replace("-", "_").split("_")
    language = parts[0].lower()
    if len(parts) == 1:
        return language
    return "_".join([language, parts[1].upper(), *parts[2:]])


def locale_chain(locale: Optional[str]) -> list[str]:
    """Candidate locales from most to least specific, excluding the root."""
    normalized = normalize_locale(locale)
    if not normalized:
        return []
    parts = normalized.split("_")
    return ["_".join(parts[:i]) for i in range(len(parts), 0, -1)]


def _flatten(data: dict, prefix: str = "") -> dict[str, str]:
    flat = {}
    for key, value in data.items():
        full_key = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict):
            flat.update(_flatten(value, full_key))
        else:
            flat[full_key] = str(value)
    return flat


class ResourceBundle:
    """Read-only view over the message tables of one locale chain."""

    def __init__(self, locale: str, tables: list[dict[str, str]]):
        self.locale = locale
        self._entries = ChainMap(*tables)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._entries.get(key, default)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def keys(self) -> set[str]:
        return set(self._entries)


class BundleLoader:
    """Loads and caches resource bundles from one or more directories."""

    def __init__(
        self,
        dirs: Optional[Iterable[Union[str, Path]]] = None,
        default_locale: str = "en",
        include_builtin: bool = True,
    ):
        paths = [BUILTIN_BUNDLE_DIR] if include_builtin else []
        paths.extend(Path(d) for d in dirs or [])
        self.dirs = paths
        self.default_locale = normalize_locale(default_locale)
        self._tables: dict[str, dict[str, str]] = {}
        self._bundles: dict[str, ResourceBundle] = {}

    def _table(self, locale: str) -> dict[str, str]:
        """Merged entries of every ``messages[_locale].json`` across dirs."""
        if locale in self._tables:
            return self._tables[locale]

        filename = f"{BUNDLE_BASENAME}_{locale}.json" if locale else f"{BUNDLE_BASENAME}.json"
        merged: dict[str, str] = {}
        for directory in self.dirs:
            path = directory / filename
            if not path.is_file():
                continue
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                logger.warning("bundle_load_failed", path=str(path), error=str(e))
                continue
            if not isinstance(data, dict):
                logger.warning("bundle_not_an_object", path=str(path))
                continue
            merged.update(_flatten(data))

        self._tables[locale] = merged
        return merged

    def bundle(self, locale: Optional[str] = None) -> ResourceBundle:
        """Bundle for a locale with the full fallback chain."""
        requested = normalize_locale(locale) or self.default_locale
        if requested in self._bundles:
            return self._bundles[requested]

        chain: list[str] = []
        for candidate in locale_chain(requested) + locale_chain(self.default_locale) + [""]:
            if candidate not in chain:
                chain.append(candidate)

        bundle = ResourceBundle(requested, [self._table(c) for c in chain])
        self._bundles[requested] = bundle
        logger.debug("bundle_loaded", locale=requested, chain=chain, entries=len(bundle.keys()))
        return bundle

    def available_locales(self) -> list[str]:
        """Locales that have at least one bundle file, plus the default."""
        locales = {self.default_locale} if self.default_locale else set()
        prefix = f"{BUNDLE_BASENAME}_"
        for directory in self.dirs:
            if not directory.is_dir():
                continue
            for path in directory.glob(f"{prefix}*.json"):
                locales.add(normalize_locale(path.stem[len(prefix):]))
        return sorted(locales)

    def clear(self) -> None:
        self._tables.clear()
        self._bundles.clear()
