from __future__ import annotations

from pathlib import Path

from sightline.ingest.adapter_contract import LanguageAdapter
from sightline.ingest.python_adapter import PythonAdapter
from sightline.invariants import never, require_not_none

DEFAULT_LANGUAGE_ID = "python"

_ADAPTERS: dict[str, LanguageAdapter] = {}
_LANGUAGE_BY_EXTENSION: dict[str, str] = {}


def register_adapter(adapter: LanguageAdapter) -> None:
    language_id = adapter.language_id.lower()
    _ADAPTERS[language_id] = adapter
    for extension in adapter.file_extensions:
        _LANGUAGE_BY_EXTENSION[extension.lower()] = language_id


def registered_languages() -> list[str]:
    return sorted(_ADAPTERS)


def adapter_for_language(language_id: str) -> LanguageAdapter | None:
    return _ADAPTERS.get(language_id.lower())


def adapter_for_extension(extension: str) -> LanguageAdapter | None:
    language_id = _LANGUAGE_BY_EXTENSION.get(extension.lower())
    return _ADAPTERS.get(language_id) if language_id is not None else None


def adapter_for_path(
    path: Path,
    *,
    language_id: str | None = None,
    default_language_id: str = DEFAULT_LANGUAGE_ID,
) -> LanguageAdapter:
    """Pick the adapter for ``path``.

    An explicit ``language_id`` must name a registered adapter. Otherwise the
    file extension decides, and unknown extensions get the default language.
    """
    if language_id is not None:
        adapter = adapter_for_language(language_id)
        if adapter is None:
            never(
                "unknown language adapter",
                language_id=language_id,
                registered=",".join(registered_languages()),
            )
        return adapter
    adapter = adapter_for_extension(path.suffix) if path.suffix else None
    if adapter is not None:
        return adapter
    return require_not_none(
        adapter_for_language(default_language_id),
        reason="no default language adapter",
        strict=True,
        language_id=default_language_id,
    )


register_adapter(PythonAdapter())
