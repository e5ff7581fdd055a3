"""
Localization-aware dialog cache.

Documents live in one folder per language:

    Dialogs/
        en/intro.json
        en/town/shopkeeper.json
        zh-TW/intro.json

The file stem is the source id. Loading fills one bucket per language;
a separate legacy cache, keyed by source id only, serves documents that
sit directly under the base path. The two caches are never merged.

Cached values are authored definitions only. Anything derived from
them (filtered options, resolved ids) is recomputed by the caller on
every fetch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from narrative.dialog.models import DialogDefinition, DialogNode
from narrative.dialog.parser import DialogParser
from narrative.dialog.snapshot import DialogSnapshotStore

LANGUAGE_ALIASES: dict[str, tuple[str, ...]] = {
    "en": ("en-US", "english"),
    "zh": ("zh-TW", "zh-CN", "chinese"),
    "ja": ("ja-JP", "japanese"),
    "ko": ("ko-KR", "korean"),
    "fr": ("fr-FR", "french"),
    "de": ("de-DE", "german"),
    "es": ("es-ES", "spanish"),
    "pt": ("pt-BR", "pt-PT", "portuguese"),
    "ru": ("ru-RU", "russian"),
    "it": ("it-IT", "italian"),
}


def find_fallback_language(target: Optional[str], supported: Sequence[str]) -> Optional[str]:
    """
    Pick the loaded language that best stands in for ``target``.

    Order: exact match ignoring case, same primary subtag, alias table,
    then the first loaded language. Returns None only when nothing is
    loaded or no target is given.
    """
    if not target or not supported:
        return None

    lowered = target.lower()
    for lang in supported:
        if lang.lower() == lowered:
            return lang

    target_base = lowered.split("-")[0]
    for lang in supported:
        if lang.lower().split("-")[0] == target_base:
            return lang

    for candidate in LANGUAGE_ALIASES.get(target_base, ()):
        for lang in supported:
            if lang.lower() == candidate.lower():
                return lang

    return supported[0]


@dataclass(frozen=True)
class LoadResult:
    """Outcome of a definition fetch. A failed fetch carries no definition."""
    source_id: str
    definition: Optional[DialogDefinition] = None
    language: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.definition is not None

    @property
    def nodes(self) -> tuple[DialogNode, ...]:
        return self.definition.nodes if self.definition else ()


@dataclass(frozen=True)
class CacheInfo:
    file_count: int
    entry_count: int


@dataclass
class LocalizationStatistics:
    initialized: bool
    current_language: str
    languages: dict[str, int] = field(default_factory=dict)

    @property
    def total_definitions(self) -> int:
        return sum(self.languages.values())


class DialogCache:
    """
    Owns every parsed dialog definition.

    Create one per game at the composition root and pass it to the
    controllers that need it.

    Usage:
        cache = DialogCache("Dialogs", default_language="en")
        cache.load_all_languages()
        cache.set_language("ja")
        result = cache.get_definition("intro")
    """

    def __init__(
        self,
        base_path: Path | str,
        default_language: str = "en",
        parser: Optional[DialogParser] = None,
        snapshots: Optional[DialogSnapshotStore] = None,
    ):
        self.base_path = Path(base_path)
        self.default_language = default_language
        self.parser = parser or DialogParser()
        self.snapshots = snapshots
        self.logger = logging.getLogger(__name__)

        self._languages: dict[str, dict[str, DialogDefinition]] = {}
        self._legacy: dict[str, DialogDefinition] = {}
        self._current_language = default_language
        self._initialized = False

    # Localized documents

    @property
    def current_language(self) -> str:
        return self._current_language

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def supported_languages(self) -> list[str]:
        return list(self._languages.keys())

    def is_language_supported(self, code: Optional[str]) -> bool:
        return bool(code) and code in self._languages

    def load_all_languages(self, base_path: Path | str | None = None) -> int:
        """
        Load every language folder under the base path.

        Per-file failures are logged and skipped. A language with no
        loadable document is dropped. Returns the number of languages
        that loaded at least one document.
        """
        if base_path is not None:
            self.base_path = Path(base_path)

        self._languages.clear()
        self._initialized = False

        if not self.base_path.is_dir():
            self.logger.error(f"Dialog directory not found: {self.base_path}")
            return 0

        for language_dir in sorted(p for p in self.base_path.iterdir() if p.is_dir()):
            bucket: dict[str, DialogDefinition] = {}
            failures = 0
            for file_path in sorted(language_dir.rglob("*.json")):
                definition = self.parser.load_file(file_path)
                if definition is None:
                    failures += 1
                    continue
                if file_path.stem in bucket:
                    self.logger.warning(
                        f"Duplicate dialog id '{file_path.stem}' in {language_dir.name}, "
                        f"replacing with {file_path}"
                    )
                bucket[file_path.stem] = definition

            if bucket:
                self._languages[language_dir.name] = bucket
                self.logger.info(
                    f"Loaded {len(bucket)} dialogs for '{language_dir.name}'"
                    + (f" ({failures} failed)" if failures else "")
                )
            else:
                self.logger.warning(f"No valid dialogs for language '{language_dir.name}'")

        self._initialized = True
        if self._languages and self._current_language not in self._languages:
            fallback = find_fallback_language(self._current_language, self.supported_languages)
            self.logger.warning(
                f"Language '{self._current_language}' not available, using '{fallback}'"
            )
            self._current_language = fallback

        self.logger.info(f"Loaded {len(self._languages)} languages from {self.base_path}")
        return len(self._languages)

    def set_language(self, code: Optional[str]) -> bool:
        """Switch the current language. Unknown codes leave it unchanged."""
        if not code:
            self.logger.warning("Cannot set an empty language code")
            return False
        if not self._initialized:
            self.logger.warning(f"Cannot set language '{code}' before languages are loaded")
            return False
        if code not in self._languages:
            self.logger.warning(f"Language '{code}' is not loaded")
            return False

        self._current_language = code
        return True

    def set_language_or_fallback(self, code: Optional[str]) -> bool:
        """Switch to ``code`` or the best loaded stand-in for it."""
        if self.set_language(code):
            return True
        fallback = find_fallback_language(code, self.supported_languages)
        if fallback is None:
            return False
        self.logger.warning(f"Using fallback language '{fallback}' for '{code}'")
        return self.set_language(fallback)

    def source_ids(self, language: Optional[str] = None) -> list[str]:
        return sorted(self._languages.get(language or self._current_language, {}))

    def get_localized(self, source_id: str, language: Optional[str] = None) -> Optional[DialogDefinition]:
        bucket = self._languages.get(language or self._current_language)
        if bucket is None:
            return None
        return bucket.get(source_id)

    def get_definition(
        self,
        source_id: str,
        language: Optional[str] = None,
        force_reload: bool = False,
    ) -> LoadResult:
        """
        Fetch a definition.

        The requested (or current) language bucket is tried first. On a
        miss the legacy path is used, which loads and caches by source id.
        """
        lang = language or self._current_language
        definition = self.get_localized(source_id, lang)
        if definition is not None:
            return LoadResult(source_id, definition, lang)

        if self._initialized:
            self.logger.debug(f"'{source_id}' not found for '{lang}', trying legacy path")
        return self.load_legacy(source_id, force_reload)

    # Legacy documents

    def load_legacy(self, source_id: str, force_reload: bool = False) -> LoadResult:
        if not source_id:
            self.logger.error("Dialog source id is empty")
            return LoadResult(source_id)

        if not force_reload and source_id in self._legacy:
            return LoadResult(source_id, self._legacy[source_id])

        path = self.base_path / f"{source_id}.json"
        if not path.is_file():
            self.logger.error(f"Dialog file not found: {path}")
            return LoadResult(source_id)

        definition = self.parser.load_file(path)
        if definition is None:
            return LoadResult(source_id)

        self._legacy[source_id] = definition
        self.logger.info(f"Cached legacy dialog '{source_id}' ({len(definition.nodes)} nodes)")
        return LoadResult(source_id, definition)

    def is_cached(self, source_id: str) -> bool:
        return source_id in self._legacy

    def cached_source_ids(self) -> list[str]:
        return list(self._legacy.keys())

    def clear_legacy(self, source_id: str) -> bool:
        if self._legacy.pop(source_id, None) is None:
            return False
        self.logger.info(f"Cleared cached dialog '{source_id}'")
        return True

    def cache_info(self) -> CacheInfo:
        return CacheInfo(
            file_count=len(self._legacy),
            entry_count=sum(len(d.nodes) for d in self._legacy.values()),
        )

    def save_snapshot(self, source_id: str) -> bool:
        """Persist a legacy-cached definition to the snapshot store."""
        definition = self._legacy.get(source_id)
        if self.snapshots is None or definition is None:
            return False
        return self.snapshots.save(source_id, definition)

    def load_snapshot(self, source_id: str) -> LoadResult:
        """Read a snapshot without touching either cache."""
        if self.snapshots is None:
            return LoadResult(source_id)
        return LoadResult(source_id, self.snapshots.load(source_id))

    # Lifecycle

    def clear_all(self) -> None:
        """Drop both caches. Languages must be loaded again before use."""
        self._languages.clear()
        self._legacy.clear()
        self._initialized = False
        self._current_language = self.default_language
        self.logger.info("Cleared all dialog caches")

    def statistics(self) -> LocalizationStatistics:
        return LocalizationStatistics(
            initialized=self._initialized,
            current_language=self._current_language,
            languages={lang: len(bucket) for lang, bucket in self._languages.items()},
        )
