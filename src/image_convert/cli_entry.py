"""Click CLI wiring and entry points for image_convert."""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import click
from rich import print
from rich.logging import RichHandler
from rich.markup import escape

from src.config_loader import ConfigError, load_config, parse_crop
from src.datatypes import FORMAT_CONFIGS, CenterCrop, ConversionConfig, ICOConfig, OutputFormat
from src.image_convert.formats import convert, infer_format
from src.image_convert.identify import identify
from src.image_convert.render.errors import ImageConvertError
from src.image_convert.resource import from_path

logger = logging.getLogger(__name__)

_FORMAT_CHOICES = [fmt.value for fmt in OutputFormat]


def _configure_logging(*, verbose: bool, quiet: bool) -> None:
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False, markup=False)],
        force=True,
    )


def _parse_crop_option(value: str) -> CenterCrop:
    try:
        return parse_crop(value, "--crop")
    except ConfigError as exc:
        raise click.BadParameter(str(exc), param_hint="--crop") from exc


def _resolve_config(
    *,
    config_path: Optional[str],
    output: Path,
    format_name: Optional[str],
    overrides: Dict[str, Any],
) -> ConversionConfig:
    """Merge the config file, the requested or inferred format, and CLI overrides."""

    config = load_config(config_path) if config_path else None
    if format_name:
        fmt = OutputFormat(format_name)
    elif config is not None:
        fmt = config.format
    else:
        inferred = infer_format(output)
        if inferred is None:
            raise click.ClickException(
                f"Cannot infer the output format from {output.name}; pass --format."
            )
        fmt = inferred

    if config is not None and config.format is fmt:
        options = config.options
    else:
        if config is not None:
            logger.warning(
                "Ignoring [options] for %s because the output format is %s", config.format.value, fmt.value
            )
        options = FORMAT_CONFIGS[fmt]()

    known = {field.name for field in dataclasses.fields(options)}
    applicable = {key: value for key, value in overrides.items() if key in known}
    skipped = sorted(key for key in overrides if key not in known)
    if skipped:
        logger.warning("Options not supported by %s output: %s", fmt.value, ", ".join(skipped))
    if applicable:
        options = dataclasses.replace(options, **applicable)
    if isinstance(options, ICOConfig) and not options.sizes:
        raise click.ClickException("ico output needs at least one --size (or options.sizes in the config).")
    return ConversionConfig(format=fmt, options=options)


@click.group()
@click.option("--verbose", is_flag=True, help="Show debug output.")
@click.option("--quiet", is_flag=True, help="Only show warnings and errors.")
def main(verbose: bool, quiet: bool) -> None:
    """Identify and convert images."""
    if verbose and quiet:
        raise click.ClickException("Cannot use both --verbose and --quiet.")
    _configure_logging(verbose=verbose, quiet=quiet)


@main.command("identify")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
def identify_command(path: Path) -> None:
    """Print the resolution, format and interlacing of PATH."""
    try:
        result = identify(from_path(path))
    except ImageConvertError as exc:
        raise click.ClickException(str(exc)) from exc
    print(f"[bold]{escape(str(path))}[/]")
    print(f"  resolution: [cyan]{result.resolution}[/]")
    print(f"  format:     [cyan]{escape(result.format)}[/]")
    print(f"  interlace:  [cyan]{result.interlace.value}[/]")


@main.command("convert")
@click.argument("input_path", metavar="INPUT", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("output_path", metavar="OUTPUT", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--config", "config_path", default=None, type=click.Path(dir_okay=False), help="TOML file with [output] and [options] tables.")
@click.option("--format", "format_name", type=click.Choice(_FORMAT_CHOICES, case_sensitive=False), default=None, help="Output format; inferred from OUTPUT's extension when omitted.")
@click.option("--width", type=click.IntRange(0, 65535), default=None, help="Bounding width; 0 keeps the original.")
@click.option("--height", type=click.IntRange(0, 65535), default=None, help="Bounding height; 0 keeps the original.")
@click.option("--allow-enlarge", is_flag=True, default=False, help="Allow the output to be larger than the input.")
@click.option("--sharpen", type=float, default=None, help="Sharpen amount; negative derives it from the resize.")
@click.option("--crop", "crop", default=None, help="Centre crop to a W:H ratio, e.g. 16:9.")
@click.option("--quality", type=click.IntRange(0, 100), default=None, help="JPEG/WEBP quality.")
@click.option("--respect-orientation", is_flag=True, default=False, help="Rotate according to the EXIF orientation tag.")
@click.option("--size", "sizes", type=click.IntRange(1, 256), multiple=True, help="Square icon size for ico output; repeatable.")
def convert_command(
    input_path: Path,
    output_path: Path,
    config_path: Optional[str],
    format_name: Optional[str],
    width: Optional[int],
    height: Optional[int],
    allow_enlarge: bool,
    sharpen: Optional[float],
    crop: Optional[str],
    quality: Optional[int],
    respect_orientation: bool,
    sizes: tuple[int, ...],
) -> None:
    """Convert INPUT into OUTPUT."""
    # Only options given on the command line override the config; 0 and a
    # negative sharpen reset the config value to "original" and "auto".
    overrides: Dict[str, Any] = {}
    if width is not None:
        overrides["width"] = width or None
    if height is not None:
        overrides["height"] = height or None
    if allow_enlarge:
        overrides["shrink_only"] = False
    if sharpen is not None:
        overrides["sharpen"] = None if sharpen < 0 else sharpen
    if crop:
        overrides["crop"] = _parse_crop_option(crop)
    if quality is not None:
        overrides["quality"] = quality
    if respect_orientation:
        overrides["respect_orientation"] = True
    if sizes:
        overrides["sizes"] = [(size, size) for size in sizes]
    try:
        config = _resolve_config(
            config_path=config_path,
            output=output_path,
            format_name=format_name.lower() if format_name else None,
            overrides=overrides,
        )
        convert(from_path(output_path), from_path(input_path), config)
    except (ConfigError, ImageConvertError) as exc:
        raise click.ClickException(str(exc)) from exc
    print(f"[green]Wrote[/] {escape(str(output_path))} ({config.format.value})")


if __name__ == "__main__":
    main()
