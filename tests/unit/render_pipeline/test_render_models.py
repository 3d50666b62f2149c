"""Unit tests for render_pipeline.models and render_pipeline.errors modules."""

import pytest

from src.parity_gate import build_mismatch_report
from src.render_pipeline import (
    GENERIC_PARITY_ERROR_CODE,
    STRICT_PARITY_ERROR_CODE,
    ParityMismatchError,
    RenderContext,
    RenderError,
    RendererUnavailableError,
    RenderFlags,
)


class TestRenderFlagsDefaults:

    def test_defaults(self):
        flags = RenderFlags()

        assert flags.use_native_strategy is False
        assert flags.fallback_on_mismatch is True
        assert flags.enforce_parity is True
        assert flags.parity_error_code == GENERIC_PARITY_ERROR_CODE
        assert flags.parity_transform is None
        assert flags.on_parity_mismatch is None


class TestRenderFlagsFromMapping:
    """Test cases for RenderFlags.from_mapping()."""

    @pytest.mark.parametrize("key", [
        'use_native_strategy', 'useNativeStrategy', 'useNativePipeline', 'useTripletPipeline',
    ])
    def test_native_strategy_aliases(self, key):
        assert RenderFlags.from_mapping({key: True}).use_native_strategy is True

    @pytest.mark.parametrize("key", [
        'fallback_on_mismatch', 'fallbackOnMismatch', 'enableLegacyFallback', 'tripletFallbackToPhase2',
    ])
    def test_fallback_aliases(self, key):
        assert RenderFlags.from_mapping({key: False}).fallback_on_mismatch is False

    @pytest.mark.parametrize("key", ['enforceParity', 'enforceNativeParity', 'enforceTripletParity'])
    def test_parity_aliases(self, key):
        assert RenderFlags.from_mapping({key: False}).enforce_parity is False

    def test_first_matching_key_wins(self):
        flags = RenderFlags.from_mapping({'useNativeStrategy': False, 'useTripletPipeline': True})

        assert flags.use_native_strategy is False

    def test_none_values_are_skipped(self):
        flags = RenderFlags.from_mapping({'useNativeStrategy': None, 'useTripletPipeline': True})

        assert flags.use_native_strategy is True

    def test_values_are_coerced_to_bool(self):
        assert RenderFlags.from_mapping({'enforceParity': 0}).enforce_parity is False
        assert RenderFlags.from_mapping({'useNativeStrategy': 'yes'}).use_native_strategy is True

    def test_empty_error_code_uses_default(self):
        assert RenderFlags.from_mapping({'parityErrorCode': ''}).parity_error_code == GENERIC_PARITY_ERROR_CODE
        assert RenderFlags.from_mapping({'parityErrorCode': 'X'}).parity_error_code == 'X'

    def test_non_callable_hooks_are_dropped(self):
        flags = RenderFlags.from_mapping({'parityTransform': 'nope', 'onParityMismatch': 42})

        assert flags.parity_transform is None
        assert flags.on_parity_mismatch is None

    def test_callable_hooks_are_kept(self):
        def transform(html, meta):
            return html

        assert RenderFlags.from_mapping({'parityTransform': transform}).parity_transform is transform

    def test_none_mapping(self):
        assert RenderFlags.from_mapping(None) == RenderFlags()

    def test_unrelated_keys_are_ignored(self):
        assert RenderFlags.from_mapping({'theme': 'github'}) == RenderFlags()


class TestRenderContext:

    def test_is_frozen(self):
        context = RenderContext(source_path="a.md")

        with pytest.raises(AttributeError):
            context.source_path = "b.md"


class TestErrors:
    """Test cases for the render error hierarchy."""

    def test_renderer_unavailable(self):
        error = RendererUnavailableError("native", "not configured")

        assert isinstance(error, RenderError)
        assert error.strategy == "native"
        assert str(error) == "native renderer is unavailable: not configured"

    def test_parity_mismatch_carries_report(self):
        report = build_mismatch_report("<section>legacy</section>", "<section>native</section>")

        error = ParityMismatchError(report, code=STRICT_PARITY_ERROR_CODE)

        assert isinstance(error, RenderError)
        assert error.code == STRICT_PARITY_ERROR_CODE
        assert error.parity is report
        assert "index 9" in str(error)
        assert STRICT_PARITY_ERROR_CODE in str(error)
