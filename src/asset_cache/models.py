"""Data models for the asset cache.

All models use dataclasses, following the other packages' models modules.
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class AssetKind(str, Enum):
    """Kinds of file objects returned by the Notion API.

    Only FILE (Notion-hosted, signed and expiring) is cached locally. EXTERNAL
    and CUSTOM_EMOJI URLs are used as-is; EMOJI carries no URL at all.
    """
    FILE = "file"
    EXTERNAL = "external"
    CUSTOM_EMOJI = "custom_emoji"
    EMOJI = "emoji"


@dataclass
class AssetReference:
    """A reference to a binary asset, as found on a block or a page.

    Attributes:
        kind: Which hosting kind the reference is
        url: The asset URL (None for emoji icons)
        raw: The full remote object, kept so that captions, names and
             expiry times survive a rewrite

    Example:
        >>> ref = AssetReference.from_object({"type": "file", "file": {"url": "https://..."}})
        >>> ref.kind
        <AssetKind.FILE: 'file'>
    """
    kind: AssetKind
    url: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_object(cls, obj: Optional[Dict[str, Any]]) -> Optional['AssetReference']:
        """Build a reference from a Notion file or icon object.

        Returns None for a missing object or an unknown type.
        """
        if not obj:
            return None
        try:
            kind = AssetKind(obj.get('type'))
        except ValueError:
            return None
        url = None
        if kind is not AssetKind.EMOJI:
            url = (obj.get(kind.value) or {}).get('url')
        return cls(kind=kind, url=url, raw=obj)

    def with_url(self, url: str) -> 'AssetReference':
        """Return a copy of this reference pointing at another URL."""
        return AssetReference(kind=self.kind, url=url, raw=self.raw)

    def to_object(self) -> Dict[str, Any]:
        """Return the remote object representation with the current URL."""
        obj = copy.deepcopy(self.raw)
        if self.kind is not AssetKind.EMOJI and self.url is not None:
            inner = dict(obj.get(self.kind.value) or {})
            inner['url'] = self.url
            obj[self.kind.value] = inner
        return obj

    @property
    def is_cacheable(self) -> bool:
        """Only Notion-hosted files expire and need a local copy."""
        return self.kind is AssetKind.FILE and bool(self.url)


@dataclass
class AssetResolution:
    """Outcome of resolving one asset reference.

    Attributes:
        url: Path relative to the virtual content root for cached files,
             or the original URL for pass-through kinds
        local_path: Absolute path of the cached file (None if not cached)
        was_hit: True for a cache hit, False for a download, None when the
                 reference was not eligible for caching
    """
    url: Optional[str]
    local_path: Optional[str] = None
    was_hit: Optional[bool] = None


@dataclass
class AssetAnalytics:
    """Download and cache-hit counters for one document render."""
    downloaded: int = 0
    cached: int = 0

    def record(self, was_hit: Optional[bool]) -> None:
        """Count a resolution outcome (None is not counted)."""
        if was_hit is True:
            self.cached += 1
        elif was_hit is False:
            self.downloaded += 1

    @property
    def total(self) -> int:
        return self.downloaded + self.cached
