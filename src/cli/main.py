"""Main CLI entry point for the md-render command.

This module provides the Typer application that renders a Markdown file to
the publishing surface's inline-styled HTML, through either the legacy
generator or the native strategy guarded by the parity gate.
"""

import asyncio
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from src.legacy_renderer import LegacyConverter, ResolutionCache, VaultPathResolver, clean_html_for_draft
from src.native_renderer import NativeRenderer, ReferenceHostRenderer
from src.render_pipeline import (
    STRICT_PARITY_ERROR_CODE,
    ParityMismatchError,
    RenderContext,
    RendererUnavailableError,
    create_render_pipelines,
)

from .config import DEFAULT_CONFIG_PATH, ConfigLoader, settings_to_flags, settings_to_theme
from .errors import ConfigError, ConfigFilesystemError
from .models import ExitCode, RenderSettings
from .output import OutputHandler

app = typer.Typer(
    name="md-render",
    help="Render Markdown to inline-styled HTML for the publishing surface.",
    add_completion=False,
    rich_markup_mode=None,
    no_args_is_help=True,
)

logger = logging.getLogger(__name__)


def _configure_logging(verbosity: int, logdir: Optional[str] = None) -> None:
    """Configure the 'src' namespace logger from the verbosity count.

    Args:
        verbosity: 0=WARNING, 1=INFO, 2+=DEBUG
        logdir: Optional directory for a timestamped log file
    """
    if verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    app_logger = logging.getLogger("src")
    app_logger.setLevel(level)

    date_format = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter("%(asctime)s [%(levelname)8s] %(message)s", datefmt=date_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    if logdir:
        log_path = Path(logdir)
        log_path.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_path / f"md-render_{timestamp}.log"

        file_formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt=date_format
        )
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(file_formatter)
        app_logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")


def _load_settings(config_path: Optional[str]) -> RenderSettings:
    """Load the given config, or the default config when it exists."""
    if config_path:
        return ConfigLoader.load(config_path)
    if os.path.exists(DEFAULT_CONFIG_PATH):
        return ConfigLoader.load(DEFAULT_CONFIG_PATH)
    logger.debug("No configuration file, using defaults")
    return RenderSettings()


async def _render(
    markdown: str,
    source_path: str,
    settings: RenderSettings,
    native: bool,
    fallback: bool,
    parity: bool,
    strict: bool,
    export: bool,
    output: OutputHandler,
) -> str:
    flags = settings_to_flags(settings)
    flags.use_native_strategy = native
    flags.fallback_on_mismatch = fallback and not strict
    flags.enforce_parity = parity
    if strict:
        flags.parity_error_code = STRICT_PARITY_ERROR_CODE

    vault_root = settings.vault_root or os.path.dirname(os.path.abspath(source_path))
    resolver = VaultPathResolver(vault_root, ResolutionCache())
    converter = LegacyConverter(
        theme=settings_to_theme(settings),
        avatar_url=settings.avatar_url,
        show_image_caption=settings.show_image_caption,
        resolver=resolver,
    )
    native_renderer = NativeRenderer(converter, ReferenceHostRenderer()) if native else None
    pipelines = create_render_pipelines(converter, get_flags=lambda: flags, native_renderer=native_renderer)
    pipeline = pipelines.select(flags)

    context = RenderContext(
        markdown=markdown,
        source_path=os.path.relpath(os.path.abspath(source_path), os.path.abspath(vault_root)),
    )
    output.info(f"Rendering with the {'native' if native else 'legacy'} strategy")

    if export:
        result = await pipeline.render_for_export(markdown, context)
        output.print_diagnostics(result.diagnostics)
        return result.html
    return await pipeline.render_for_preview(markdown, context)


@app.command()
def main_command(
    file: str = typer.Argument(..., help="Markdown file to render"),
    out: Optional[str] = typer.Option(None, "--out", "-o", help="Write HTML to this file instead of stdout", metavar="PATH"),
    config: Optional[str] = typer.Option(
        None, "--config", help=f"Configuration file (default: {DEFAULT_CONFIG_PATH} if present)", metavar="PATH",
    ),
    native: Optional[bool] = typer.Option(
        None, "--native/--legacy", help="Render through the host engine, or through the legacy generator",
    ),
    no_fallback: bool = typer.Option(False, "--no-fallback", help="Fail instead of returning legacy output"),
    no_parity: bool = typer.Option(False, "--no-parity", help="Skip the legacy comparison of native output"),
    strict: bool = typer.Option(
        False, "--strict", help="Strict parity gate: no fallback, STRICT_PARITY_MISMATCH error code",
    ),
    export: bool = typer.Option(False, "--export", help="Report problems recovered by fallback"),
    draft: bool = typer.Option(False, "--draft", help="Flatten nested lists for the draft editor"),
    verbosity: int = typer.Option(0, "--verbose", "-v", count=True, help="Increase verbosity (-v info, -vv debug)"),
    logdir: Optional[str] = typer.Option(None, "--logdir", help="Directory for log files (creates timestamped log file)"),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colored output"),
) -> None:
    """Render a Markdown FILE to inline-styled HTML.

    \b
    EXAMPLES:
      md-render note.md                      # legacy generator, HTML on stdout
      md-render note.md --native --strict    # native strategy, fail on any mismatch
      md-render note.md --native --export -v # report recovered mismatches
    """
    _configure_logging(verbosity, logdir)
    output = OutputHandler(verbosity=verbosity, no_color=no_color)

    try:
        settings = _load_settings(config)
    except (ConfigError, ConfigFilesystemError) as e:
        logger.error(f"Configuration failed: {e}")
        output.error(str(e))
        raise typer.Exit(ExitCode.CONFIG_ERROR)

    try:
        with open(file, 'r', encoding='utf-8') as f:
            markdown = f.read()
    except OSError as e:
        output.error(f"Cannot read {file}: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    use_native = settings.use_native_strategy if native is None else native

    try:
        html = asyncio.run(_render(
            markdown,
            file,
            settings,
            native=use_native,
            fallback=settings.fallback_on_mismatch and not no_fallback,
            parity=settings.enforce_parity and not no_parity,
            strict=strict,
            export=export,
            output=output,
        ))
    except ParityMismatchError as e:
        output.error(f"Parity mismatch ({e.code})")
        output.print_mismatch(e.parity)
        raise typer.Exit(ExitCode.PARITY_MISMATCH)
    except RendererUnavailableError as e:
        output.error(str(e))
        raise typer.Exit(ExitCode.RENDERER_UNAVAILABLE)
    except Exception as e:
        logger.exception("Unexpected error during rendering")
        output.error(f"Unexpected error: {e}")
        raise typer.Exit(ExitCode.GENERAL_ERROR)

    if draft:
        html = clean_html_for_draft(html)

    if out:
        try:
            Path(out).write_text(html, encoding='utf-8')
        except OSError as e:
            output.error(f"Cannot write {out}: {e}")
            raise typer.Exit(ExitCode.GENERAL_ERROR)
        output.success(f"Wrote {out}")
    else:
        typer.echo(html)

    raise typer.Exit(ExitCode.SUCCESS)


def main() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    main()
