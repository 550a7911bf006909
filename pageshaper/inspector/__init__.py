from pageshaper.inspector.inspector import STRUCTURAL_TAGS, DocumentInspector, reading_time

__all__ = ["DocumentInspector", "STRUCTURAL_TAGS", "reading_time"]
