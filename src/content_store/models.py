"""Data models for the local content store."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from src.rendering.models import RenderedDocument


@dataclass
class StoreEntry:
    """One synced document in the local content store.

    Attributes:
        id: Document (page) id, the store key
        digest: Fingerprint of the synced revision (the page's
                last_edited_time); a matching digest means the entry is current
        data: Property data produced by the renderer
        rendered: Rendered markup and heading outline
        file_path: Virtual path of the document's source file
        asset_imports: Local asset paths referenced by the rendered markup

    Example:
        >>> entry = StoreEntry(
        ...     id="d16195b7-...",
        ...     digest="2024-01-15T10:30:00.000Z",
        ...     data={"id": "d16195b7-...", "properties": {"Name": "Hello"}},
        ... )
    """
    id: str
    digest: str
    data: Dict[str, Any] = field(default_factory=dict)
    rendered: Optional[RenderedDocument] = None
    file_path: str = ""
    asset_imports: List[str] = field(default_factory=list)
