"""Typed exception hierarchy for rendering errors."""

from src.notion_api.errors import SyncError


class RenderError(SyncError):
    """Base exception for all rendering errors."""
    pass


class MalformedTocError(RenderError):
    """Raised when the table of contents does not have the expected nav > ol > li shape."""

    def __init__(self, message: str):
        super().__init__(f"Malformed table of contents: {message}")


class StageNotFoundError(RenderError):
    """Raised when a transform stage name is not registered."""

    def __init__(self, name: str):
        super().__init__(f"Transform stage '{name}' is not registered")
        self.name = name
