"""
Paper3D CLI - inspect and edit project atlases from the command line
"""

import logging
import sys

import click

from paper3d import Workspace, __version__
from paper3d.config import load_settings
from paper3d.converters import export_texture, export_uv_guide, import_texture, load_project, save_project
from paper3d.exceptions import GeometryError, SnapshotError, TextureDecodeError


def _open(project: str) -> Workspace:
    return load_project(Workspace(load_settings()), project)


def _fail(label: str, e: Exception):
    click.secho(f"{label}: {e}", fg='red', err=True)
    sys.exit(1)


def _parse_point(text: str):
    parts = [p for p in text.replace(' ', '').split(',') if p]
    try:
        values = [float(p) for p in parts]
    except ValueError:
        raise click.BadParameter(f"Point coordinates must be numbers, got '{text}'")
    if len(values) == 2:
        # x,z on the ground plane
        return (values[0], 0.0, values[1])
    if len(values) == 3:
        return tuple(values)
    raise click.BadParameter(f"Expected 'x,z' or 'x,y,z', got '{text}'")


@click.group()
@click.version_option(version=__version__, prog_name="paper3d")
@click.option('--verbose', '-v', is_flag=True, help='Show debug logging')
def cli(verbose):
    """
    Paper3D - pack and paint the shared texture atlas of cardboard projects.

    Examples:
        paper3d new project.json
        paper3d add project.json -p 0,0 -p 2,0 -p 2,1 -p 0,1
        paper3d pack project.json
        paper3d export-guide project.json guide.png
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )


@cli.command()
@click.argument('output')
def new(output):
    """Create an empty project file."""
    try:
        workspace = Workspace(load_settings())
        save_project(workspace, output)
        click.secho(f"✓ Created {output}", fg='green')
    except ValueError as e:
        _fail("Error", e)


@cli.command()
@click.argument('project')
def info(project):
    """List every shape and its island."""
    try:
        workspace = _open(project)
    except FileNotFoundError as e:
        _fail("Error", e)
    except SnapshotError as e:
        _fail("Load failed", e)

    size = workspace.settings.atlas_size
    click.echo(f"Atlas: {size}x{size}, {len(workspace)} shapes")
    for idx, shape in enumerate(workspace):
        b = shape.island
        click.echo(f"  Shape {idx + 1} [{shape.kind}] island {b.width}x{b.height} at ({b.x}, {b.y})  id={shape.id}")


@cli.command()
@click.argument('project')
@click.option('-p', '--point', 'points', multiple=True, required=True, help="Point as 'x,z' (ground) or 'x,y,z'")
@click.option('--triangle', is_flag=True, help='Create a fill triangle (exactly three points)')
def add(project, points, triangle):
    """Add a shape and allocate its island."""
    try:
        workspace = _open(project)
        parsed = [_parse_point(p) for p in points]
        if triangle:
            if len(parsed) != 3:
                raise click.BadParameter("A triangle needs exactly three points")
            shape = workspace.add_triangle(*parsed)
        else:
            shape = workspace.add_outline(parsed)
        save_project(workspace, project)
        b = shape.island
        click.secho(f"✓ Added shape {shape.id} with island {b.width}x{b.height} at ({b.x}, {b.y})", fg='green')
    except click.BadParameter:
        raise
    except FileNotFoundError as e:
        _fail("Error", e)
    except SnapshotError as e:
        _fail("Load failed", e)
    except GeometryError as e:
        _fail("Invalid shape", e)


@cli.command()
@click.argument('project')
@click.option('-o', '--output', default=None, help='Write the packed project here instead of in place')
def pack(project, output):
    """Shelf-pack every island, tallest first."""
    try:
        workspace = _open(project)
        placements = workspace.auto_pack()
        save_project(workspace, output or project)
        click.secho(f"✓ Packed {len(placements)} islands", fg='green')
    except FileNotFoundError as e:
        _fail("Error", e)
    except SnapshotError as e:
        _fail("Load failed", e)


@cli.command('import-texture')
@click.argument('project')
@click.argument('image')
@click.option('-o', '--output', default=None, help='Write the project here instead of in place')
def import_texture_cmd(project, image, output):
    """Replace the atlas with an image (nearest-neighbour scaled)."""
    try:
        workspace = _open(project)
        import_texture(workspace, image)
        save_project(workspace, output or project)
        click.secho(f"✓ Imported {image}", fg='green')
    except FileNotFoundError as e:
        _fail("Error", e)
    except SnapshotError as e:
        _fail("Load failed", e)
    except TextureDecodeError as e:
        _fail(f"Texture error ({e.reason})", e)


@cli.command('export-texture')
@click.argument('project')
@click.argument('output')
@click.option('--size', type=int, default=None, help='Output edge length (default: 1024)')
def export_texture_cmd(project, output, size):
    """Export the atlas as PNG."""
    try:
        workspace = _open(project)
        export_texture(workspace, output, size)
        click.secho(f"✓ Exported texture to {output}", fg='green')
    except FileNotFoundError as e:
        _fail("Error", e)
    except SnapshotError as e:
        _fail("Load failed", e)


@cli.command('export-guide')
@click.argument('project')
@click.argument('output')
@click.option('--size', type=int, default=None, help='Output edge length (default: 1024)')
def export_guide_cmd(project, output, size):
    """Export the atlas with island outlines drawn on top."""
    try:
        workspace = _open(project)
        export_uv_guide(workspace, output, size)
        click.secho(f"✓ Exported UV guide to {output}", fg='green')
    except FileNotFoundError as e:
        _fail("Error", e)
    except SnapshotError as e:
        _fail("Load failed", e)


def main():
    """Entry point for the CLI"""
    cli()


if __name__ == '__main__':
    main()
