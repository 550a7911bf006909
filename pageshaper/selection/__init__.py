from pageshaper.selection.controller import SelectionController

__all__ = ["SelectionController"]
