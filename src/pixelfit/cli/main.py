"""pixelfit CLI.

Command-line interface for resizing images to a target file size and
cropping them to exact physical dimensions.
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer

from pixelfit import __version__
from pixelfit.config import settings
from pixelfit.units import PhysicalDimension
from pixelfit.utils.logging import configure_logging, get_logger

app = typer.Typer(
    name="pixelfit",
    help="pixelfit: fit images to a target file size or a physical crop",
    add_completion=False,
)


class Unit(str, Enum):
    """Physical unit for crop dimensions."""

    inch = "inch"
    cm = "cm"


InputImage = Annotated[
    Path,
    typer.Argument(
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
        help="Path to the input image",
    ),
]
Verbose = Annotated[
    int,
    typer.Option("--verbose", "-v", count=True, help="Increase verbosity (-v, -vv)"),
]
JsonOutput = Annotated[bool, typer.Option("--json", help="Output as JSON")]


# =============================================================================
# Commands
# =============================================================================


@app.command()
def version(json_output: JsonOutput = False) -> None:
    """Show version information."""
    if json_output:
        typer.echo(json.dumps({"version": __version__}))
    else:
        typer.echo(f"pixelfit {__version__}")


@app.command()
def info(
    image_path: InputImage,
    json_output: JsonOutput = False,
    verbose: Verbose = 0,
) -> None:
    """Show dimensions, format and size of an image."""
    from pixelfit.codec import PillowCodec  # noqa: PLC0415
    from pixelfit.sizes import format_file_size  # noqa: PLC0415

    _configure_logging(verbose)
    logger = get_logger(__name__)

    try:
        raster = PillowCodec().decode(image_path.read_bytes())
    except Exception as e:
        logger.exception("Reading image failed")
        _echo_error(e, json_output)
        raise typer.Exit(1) from None

    data = {
        "path": str(image_path),
        "format": raster.format,
        "width": raster.native_width,
        "height": raster.native_height,
        "size_bytes": raster.source_size_bytes,
        "size": format_file_size(raster.source_size_bytes),
    }
    if json_output:
        typer.echo(json.dumps(data, indent=2))
    else:
        typer.echo(f"{image_path.name}: {raster.format}")
        typer.echo(f"Dimensions: {raster.native_width} x {raster.native_height}")
        typer.echo(f"Size: {data['size']}")


@app.command()
def resize(  # noqa: PLR0913
    image_path: InputImage,
    target: Annotated[
        str,
        typer.Option("--target", "-t", help='Target size, e.g. "500 KB" or "2 MB"'),
    ],
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Output file path")
    ] = None,
    max_iterations: Annotated[
        int,
        typer.Option("--max-iterations", "-n", min=0, help="Max encode attempts"),
    ] = settings.MAX_ITERATIONS,
    json_output: JsonOutput = False,
    verbose: Verbose = 0,
) -> None:
    """Re-encode an image so its file size approximates a target."""
    from pixelfit.api import resize_with_outcome  # noqa: PLC0415
    from pixelfit.sizes import SizeReport, parse_file_size  # noqa: PLC0415

    _configure_logging(verbose)
    logger = get_logger(__name__)

    target_bytes = parse_file_size(target)
    if target_bytes <= 0:
        _echo_error(ValueError(f"Invalid target size: {target!r}"), json_output)
        raise typer.Exit(2)

    out_path = output or _default_output(image_path, "resized")
    logger.info("Starting resize", image=str(image_path), target_bytes=target_bytes)

    try:
        data = image_path.read_bytes()
        outcome = resize_with_outcome(
            data,
            target_bytes,
            max_iterations=max_iterations,
            image_name=image_path.name,
        )
        out_path.write_bytes(outcome.result.payload)
    except Exception as e:
        logger.exception("Resize failed")
        _echo_error(e, json_output)
        raise typer.Exit(1) from None

    report = SizeReport(
        original_bytes=len(data),
        target_bytes=target_bytes,
        result_bytes=outcome.result.size_bytes,
    )
    logger.info("Resize finished", output=str(out_path), regime=outcome.regime.value)

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "output": str(out_path),
                    "original_bytes": report.original_bytes,
                    "target_bytes": report.target_bytes,
                    "result_bytes": report.result_bytes,
                    "deviation_percent": round(report.deviation, 2),
                    "width": outcome.result.width,
                    "height": outcome.result.height,
                    "regime": outcome.regime.value,
                    "attempts": outcome.attempts,
                    "converged": outcome.converged,
                },
                indent=2,
            )
        )
    else:
        typer.echo(report.summary())
        typer.echo(f"Saved to {out_path}")
        if not report.is_acceptable():
            typer.echo(
                f"Warning: result is {report.deviation:.0f}% away from the target",
                err=True,
            )


@app.command()
def crop(  # noqa: PLR0913
    image_path: InputImage,
    width: Annotated[float, typer.Option("--width", "-W", min=0, help="Crop width")],
    height: Annotated[
        float, typer.Option("--height", "-H", min=0, help="Crop height")
    ],
    unit: Annotated[Unit, typer.Option("--unit", "-u", help="Unit")] = Unit.inch,
    dpi: Annotated[
        int, typer.Option("--dpi", min=1, help="Print resolution")
    ] = settings.CROP_DPI,
    output: Annotated[
        Path | None, typer.Option("--output", "-o", help="Output file path")
    ] = None,
    json_output: JsonOutput = False,
    verbose: Verbose = 0,
) -> None:
    """Crop the centre of an image to an exact physical size."""
    from pixelfit.codec import PillowCodec  # noqa: PLC0415
    from pixelfit.core.cropper import RegionCropper  # noqa: PLC0415
    from pixelfit.geometry import (  # noqa: PLC0415
        centered_crop_region,
        region_physical_size,
    )

    _configure_logging(verbose)
    logger = get_logger(__name__)
    out_path = output or _default_output(image_path, "cropped")

    try:
        crop_width, crop_height = _physical_dimensions(width, height, unit, dpi)
        codec = PillowCodec()
        raster = codec.decode(image_path.read_bytes())
        # Lay the box out on the native grid so output pixels match the print size
        native = raster.native_size
        region = centered_crop_region(crop_width, crop_height, native, native)
        result = RegionCropper(codec).crop(raster, region, native)
        out_path.write_bytes(result.payload)
        cropped_width, cropped_height = region_physical_size(
            region, native, native, unit=unit.value, dpi=dpi
        )
    except Exception as e:
        logger.exception("Crop failed")
        _echo_error(e, json_output)
        raise typer.Exit(1) from None

    logger.info("Crop finished", output=str(out_path), region=region.to_tuple())
    if json_output:
        typer.echo(
            json.dumps(
                {
                    "output": str(out_path),
                    "region": list(region.to_tuple()),
                    "width": result.width,
                    "height": result.height,
                    "size_bytes": result.size_bytes,
                },
                indent=2,
            )
        )
    else:
        typer.echo(f"Cropped {cropped_width} x {cropped_height}")
        typer.echo(f"Output: {result.width} x {result.height} px -> {out_path}")


@app.command()
def preview(  # noqa: PLR0913
    image_path: InputImage,
    width: Annotated[float, typer.Option("--width", "-W", min=0, help="Crop width")],
    height: Annotated[
        float, typer.Option("--height", "-H", min=0, help="Crop height")
    ],
    output: Annotated[
        Path, typer.Option("--output", "-o", help="Where to write the PNG preview")
    ],
    unit: Annotated[Unit, typer.Option("--unit", "-u", help="Unit")] = Unit.inch,
    dpi: Annotated[
        int, typer.Option("--dpi", min=1, help="Print resolution")
    ] = settings.CROP_DPI,
    verbose: Verbose = 0,
) -> None:
    """Render the centred crop box over a scaled preview of the image."""
    from pixelfit.codec import PillowCodec  # noqa: PLC0415
    from pixelfit.geometry import (  # noqa: PLC0415
        PreviewService,
        Size,
        centered_crop_region,
        fit_to_container,
        region_physical_size,
    )

    _configure_logging(verbose)
    logger = get_logger(__name__)

    try:
        crop_width, crop_height = _physical_dimensions(width, height, unit, dpi)
        raster = PillowCodec().decode(image_path.read_bytes())
        container = Size(
            width=settings.PREVIEW_MAX_WIDTH, height=settings.PREVIEW_MAX_HEIGHT
        )
        display = fit_to_container(raster.native_size, container)
        region = centered_crop_region(
            crop_width, crop_height, raster.native_size, display
        )
        shown_width, shown_height = region_physical_size(
            region, raster.native_size, display, unit=unit.value, dpi=dpi
        )
        label = f"{shown_width.value:.2f} x {shown_height.value:.2f} {unit.value}"
        image = PreviewService().create_preview(raster.image, display, region, label)
        image.save(output, format="PNG")
    except Exception as e:
        logger.exception("Preview failed")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    typer.echo(f"Preview saved to {output}")


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """pixelfit: fit images to a target file size or a physical crop."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


def _configure_logging(verbose: int) -> None:
    """Configure logging based on verbosity level."""
    if verbose == 0:
        level = "WARNING"
    elif verbose == 1:
        level = "INFO"
    else:  # verbose >= 2
        level = "DEBUG"

    configure_logging(level=level)


def _physical_dimensions(
    width: float, height: float, unit: Unit, dpi: int
) -> tuple[PhysicalDimension, PhysicalDimension]:
    return (
        PhysicalDimension(value=width, unit=unit.value, dpi=dpi),
        PhysicalDimension(value=height, unit=unit.value, dpi=dpi),
    )


def _default_output(image_path: Path, tag: str) -> Path:
    return image_path.with_name(f"{image_path.stem}-{tag}{image_path.suffix}")


def _echo_error(error: Exception, json_output: bool) -> None:
    if json_output:
        typer.echo(json.dumps({"error": str(error)}))
    else:
        typer.echo(f"Error: {error}", err=True)


if __name__ == "__main__":  # pragma: no cover
    app()
