"""Data models shared by the legacy generator and the transcoder."""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class CalloutInfo:
    """Callout block description used to render the legacy callout shape.

    Attributes:
        type: Lowercase callout keyword (e.g. "tip", "warning")
        title: Title text shown in the callout header
        icon: Emoji icon for the header
        label: Display label for the callout type
    """
    type: str
    title: str
    icon: str
    label: str


@dataclass(frozen=True)
class CacheEntry:
    """Cached value together with the fingerprint it was computed from.

    Attributes:
        value: Cached value
        fingerprint: Opaque marker of the source state (e.g. file mtime)
    """
    value: Any
    fingerprint: Optional[str] = None
