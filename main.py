import sys
from pathlib import Path

import click

from siv.draw import draw_grid
from siv.grid import format_grid, generate_cells
from siv.logger import SivLogger, set_level
from siv.settings import SivSettings


@click.command()
@click.argument("source",
                type=click.Path(exists=True, dir_okay=False, file_okay=True, path_type=Path))
@click.option("--output", "-o",
              type=click.Path(dir_okay=False, path_type=Path),
              default=None,
              help="Write a PNG image here instead of printing the text grid.")
@click.option("--tiles", "tiles_dir",
              type=click.Path(exists=True, dir_okay=True, file_okay=False, path_type=str),
              default=None,
              help="Directory with pre-rendered <TOKEN>.png cell tiles.")
@click.option("--cell-size", type=int, default=None,
              help="Edge of one drawn cell in pixels.")
@click.option("--font", "font_path",
              type=click.Path(exists=True, dir_okay=False, path_type=str),
              default=None,
              help="TrueType font for drawn cells.")
@click.option("--banner/--no-banner", default=None,
              help="Enable/disable the SOURCE IS VIEW banner.")
@click.option("--imports/--no-imports", "include_imports", default=None,
              help="Emit IMPORT rows for import declarations.")
@click.option("--log-level", default=None,
              type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              help="Verbosity of the siv logger.")
def cli(source,
        output,
        tiles_dir,
        cell_size,
        font_path,
        banner,
        include_imports,
        log_level):
    """
    Turn the declarations of a Swift SOURCE file into a grid of short
    pseudo-English cells.
    """
    overrides = {
        "tiles_dir": tiles_dir,
        "cell_size": cell_size,
        "font_path": font_path,
        "banner": banner,
        "include_imports": include_imports,
        "log_level": log_level,
    }
    settings = SivSettings(**{k: v for k, v in overrides.items() if v is not None})
    set_level(settings.log_level.upper())

    grid = generate_cells(source.read_bytes(), settings, path=str(source))

    if output is None:
        click.echo(format_grid(grid))
        return

    if not any(grid):
        raise click.ClickException(f"{source} has no declarations to draw")

    image = draw_grid(grid, settings)
    image.save(output, format="PNG")
    SivLogger.info("cli.image_written", path=str(output), rows=len(grid), size=image.size)
    click.echo(f"Wrote {output}")


if __name__ == "__main__":
    cli(sys.argv[1:])
