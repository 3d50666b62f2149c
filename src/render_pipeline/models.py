"""Data models for the render pipeline.

RenderFlags is read fresh on every render through the pipeline's
get_flags callable, so settings changes apply to the next render without
rebuilding the pipeline.
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Union

from src.parity_gate.models import MismatchReport

from .errors import GENERIC_PARITY_ERROR_CODE

ParityTransform = Callable[[str, Dict[str, Any]], Union[Optional[str], Awaitable[Optional[str]]]]
MismatchObserver = Callable[[Dict[str, Any]], Any]

# Canonical flag name -> accepted keys, first match wins
FLAG_ALIASES: Dict[str, tuple] = {
    'use_native_strategy': ('use_native_strategy', 'useNativeStrategy', 'useNativePipeline', 'useTripletPipeline'),
    'fallback_on_mismatch': (
        'fallback_on_mismatch', 'fallbackOnMismatch', 'enableLegacyFallback', 'tripletFallbackToPhase2',
    ),
    'enforce_parity': ('enforce_parity', 'enforceParity', 'enforceNativeParity', 'enforceTripletParity'),
    'parity_error_code': ('parity_error_code', 'parityErrorCode'),
    'parity_transform': ('parity_transform', 'parityTransform'),
    'on_parity_mismatch': ('on_parity_mismatch', 'onParityMismatch'),
}


@dataclass(frozen=True)
class RenderContext:
    """Per-call render input.

    Attributes:
        markdown: Document text
        source_path: Document path used only for relative link and image resolution
    """
    markdown: str = ""
    source_path: str = ""


@dataclass
class RenderFlags:
    """Pipeline behavior switches.

    Attributes:
        use_native_strategy: Select the native strategy as primary
        fallback_on_mismatch: Return legacy output when native fails or diverges
        enforce_parity: Compute legacy output and compare it with native output
        parity_error_code: Code carried by ParityMismatchError
        parity_transform: Optional normalization applied to both sides before
            comparison; receives (html, meta) and may be a coroutine function
        on_parity_mismatch: Optional observer called with
            {markdown, context, mismatch} on every mismatch

    Example:
        >>> flags = RenderFlags.from_mapping({'useTripletPipeline': True})
        >>> flags.use_native_strategy
        True
    """
    use_native_strategy: bool = False
    fallback_on_mismatch: bool = True
    enforce_parity: bool = True
    parity_error_code: str = GENERIC_PARITY_ERROR_CODE
    parity_transform: Optional[ParityTransform] = None
    on_parity_mismatch: Optional[MismatchObserver] = None

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping[str, Any]] = None) -> "RenderFlags":
        """Build flags from a settings mapping, accepting historical key names."""
        values: Dict[str, Any] = {}
        for name, keys in FLAG_ALIASES.items():
            for key in keys:
                if mapping and key in mapping and mapping[key] is not None:
                    values[name] = mapping[key]
                    break

        for name in ('use_native_strategy', 'fallback_on_mismatch', 'enforce_parity'):
            if name in values:
                values[name] = bool(values[name])
        if not values.get('parity_error_code'):
            values.pop('parity_error_code', None)
        for name in ('parity_transform', 'on_parity_mismatch'):
            if name in values and not callable(values[name]):
                del values[name]
        return cls(**values)


@dataclass
class RenderDiagnostic:
    """A recovered problem reported by an export render.

    Attributes:
        kind: 'native_failure', 'transform_failure' or 'parity_mismatch'
        message: Human-readable description
        report: MismatchReport for parity mismatches, else None
    """
    kind: str
    message: str
    report: Optional[MismatchReport] = None


@dataclass
class ExportResult:
    """Export render output.

    Attributes:
        html: Rendered markup
        diagnostics: Problems recovered by fallback during the render
    """
    html: str
    diagnostics: List[RenderDiagnostic] = field(default_factory=list)
