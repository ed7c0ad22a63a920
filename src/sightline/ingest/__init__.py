from sightline.ingest.adapter_contract import LanguageAdapter, ParsedModule
from sightline.ingest.python_adapter import PythonAdapter
from sightline.ingest.registry import adapter_for_path, registered_languages

__all__ = [
    "LanguageAdapter",
    "ParsedModule",
    "PythonAdapter",
    "adapter_for_path",
    "registered_languages",
]
