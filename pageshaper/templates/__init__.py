from pageshaper.templates.preferences import PreferenceStore, SessionPreferences
from pageshaper.templates.storage import JsonFileStorage, KeyValueStorage, MemoryStorage
from pageshaper.templates.store import TemplateStore
from pageshaper.templates.types import PageTemplate

__all__ = [
    "JsonFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "PageTemplate",
    "PreferenceStore",
    "SessionPreferences",
    "TemplateStore",
]
