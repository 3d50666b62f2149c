"""Resolution of relative image sources against a local vault directory.

Resolved paths are memoized in an explicitly injected ResolutionCache whose
entries carry the source file's modification time as fingerprint, so an
edited or deleted file invalidates its entry on the next lookup.
"""

import logging
import os
import re
from pathlib import Path
from typing import Dict, Optional, Tuple

from .models import CacheEntry
from .uri import decode_uri

logger = logging.getLogger(__name__)

REMOTE_SOURCE_PATTERN = re.compile(r'^(https?://|data:)', re.IGNORECASE)


class ResolutionCache:
    """Namespaced key → CacheEntry store.

    Namespaces keep entries of different vaults (or accounts) apart inside a
    single cache instance.
    """

    def __init__(self):
        self._entries: Dict[Tuple[str, str], CacheEntry] = {}

    def get(self, namespace: str, key: str, fingerprint: Optional[str] = None) -> Optional[CacheEntry]:
        """Return the entry if present and its fingerprint matches."""
        entry = self._entries.get((namespace, key))
        if entry is None:
            return None
        if fingerprint is not None and entry.fingerprint != fingerprint:
            del self._entries[(namespace, key)]
            return None
        return entry

    def set(self, namespace: str, key: str, value, fingerprint: Optional[str] = None) -> CacheEntry:
        entry = CacheEntry(value=value, fingerprint=fingerprint)
        self._entries[(namespace, key)] = entry
        return entry

    def discard(self, namespace: str, key: str) -> None:
        self._entries.pop((namespace, key), None)

    def clear(self, namespace: Optional[str] = None) -> None:
        if namespace is None:
            self._entries.clear()
            return
        for cache_key in [k for k in self._entries if k[0] == namespace]:
            del self._entries[cache_key]

    def __len__(self) -> int:
        return len(self._entries)


class VaultPathResolver:
    """Resolves image sources relative to the Markdown file being rendered.

    Lookup order for a relative source: next to the source file, then from
    the vault root. Sources that resolve outside the vault are left as-is.

    Attributes:
        vault_root: Absolute vault directory
        cache: Injected ResolutionCache
        namespace: Cache namespace (defaults to the vault path)
    """

    def __init__(self, vault_root: str, cache: Optional[ResolutionCache] = None, namespace: Optional[str] = None):
        self.vault_root = Path(vault_root).resolve()
        self.cache = cache if cache is not None else ResolutionCache()
        self.namespace = namespace or str(self.vault_root)

    def resolve(self, src: str, source_path: str = '') -> str:
        """Return a file:// URI for src, or src unchanged if it cannot be resolved.

        Entries are keyed by (source_path, src) and hold the resolved file, so a
        hit only stats that file instead of searching the candidate locations.
        """
        if not src or REMOTE_SOURCE_PATTERN.match(src):
            return src

        key = f"{source_path}\n{src}"
        cached = self.cache.get(self.namespace, key)
        if cached is not None:
            if _fingerprint(cached.value) == cached.fingerprint:
                return cached.value.as_uri()
            self.cache.discard(self.namespace, key)

        try:
            link_path = decode_uri(src)
        except ValueError:
            link_path = src
        for candidate in self._candidates(link_path, source_path):
            fingerprint = _fingerprint(candidate)
            if fingerprint is None:
                continue
            self.cache.set(self.namespace, key, candidate, fingerprint)
            uri = candidate.as_uri()
            logger.debug(f"Resolved image '{src}' to {uri}")
            return uri
        return src

    def _candidates(self, link_path: str, source_path: str):
        relative = link_path.lstrip('/')
        bases = []
        if source_path:
            bases.append((self.vault_root / source_path).parent)
        bases.append(self.vault_root)
        for base in bases:
            candidate = (base / relative).resolve()
            if os.path.commonpath([str(candidate), str(self.vault_root)]) != str(self.vault_root):
                continue
            if candidate.is_file():
                yield candidate


def _fingerprint(path: Path) -> Optional[str]:
    try:
        return str(path.stat().st_mtime_ns)
    except OSError:
        return None
