#!/usr/bin/env python3

import sys
from pathlib import Path
from typing import Any, Dict, Optional

import click
import mercantile
import yaml
from rich.console import Console
from rich.markup import escape

from . import __version__
from .errors import GeotypeError, InputError
from .geojson_input import load_geojson
from .map_renderer import render_map
from .options import DEFAULT_COLUMNS, DEFAULT_ROWS, RenderOptions
from .tiles import BBox

DEFAULT_CONFIG = {
    "render_defaults": {
        "frame": 1,
        "overzoom": 0,
        "color": True,
        "max_columns": DEFAULT_COLUMNS,
        "max_rows": DEFAULT_ROWS,
    }
}


def load_config(config_path: str = "geotype.yaml") -> Dict[str, Any]:
    """Load configuration from YAML file, falling back to defaults."""
    defaults = dict(DEFAULT_CONFIG["render_defaults"])
    config_file = Path(config_path)
    if config_file.exists():
        try:
            with open(config_file, 'r') as f:
                config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise InputError(f"Invalid config file {config_path}: {e}") from e
        if not isinstance(config, dict):
            raise InputError(f"Config file {config_path} must contain a mapping")
        defaults.update(config.get("render_defaults") or {})

    return {"render_defaults": defaults}


def parse_bbox(value: str) -> BBox:
    """Parse a "minX,minY,maxX,maxY" string into a BBox."""
    parts = value.split(',')
    if len(parts) != 4:
        raise InputError(f"Bounding box must be minX,minY,maxX,maxY, got {value!r}")
    try:
        west, south, east, north = (float(p) for p in parts)
    except ValueError:
        raise InputError(f"Bounding box values must be numbers, got {value!r}") from None
    if west > east or south > north:
        raise InputError(f"Bounding box minimums must not exceed maximums, got {value!r}")
    return BBox(west, south, east, north)


def parse_tile(value: str) -> mercantile.Tile:
    """Parse an "x/y/z" string into a tile."""
    parts = value.split('/')
    if len(parts) != 3:
        raise InputError(f"Tile must be x/y/z, got {value!r}")
    try:
        x, y, z = (int(p) for p in parts)
    except ValueError:
        raise InputError(f"Tile coordinates must be integers, got {value!r}") from None
    if z < 0 or not (0 <= x < 2 ** z and 0 <= y < 2 ** z):
        raise InputError(f"Tile {value} does not exist")
    return mercantile.Tile(x, y, z)


def build_options(config: Dict[str, Any], zoom: Optional[float] = None,
                  bbox: Optional[str] = None, tile: Optional[str] = None,
                  frame: Optional[int] = None, mod: Optional[int] = None,
                  nocolor: bool = False) -> RenderOptions:
    """Combine command-line flags with config defaults.

    Flags win over the config file. A bbox or tile frame replaces padding.
    A fractional zoom is truncated to a whole tile level.
    """
    defaults = config.get("render_defaults", {})

    frame_override = None
    if bbox is not None:
        frame_override = parse_bbox(bbox)
    elif tile is not None:
        frame_override = parse_tile(tile)

    try:
        padding = int(frame if frame is not None else defaults.get("frame", 1))
        options = RenderOptions(
            zoom=int(zoom) if zoom is not None else None,
            frame_override=frame_override,
            overzoom=int(mod if mod is not None else defaults.get("overzoom", 0)),
            frame_padding=0 if frame_override is not None else padding,
            color=bool(defaults.get("color", True)) and not nocolor,
            max_columns=int(defaults.get("max_columns", DEFAULT_COLUMNS)),
            max_rows=int(defaults.get("max_rows", DEFAULT_ROWS)),
        )
    except (TypeError, ValueError, OverflowError) as e:
        raise InputError(f"Invalid render option: {e}") from e

    if padding < 0:
        raise InputError(f"Frame padding must not be negative, got {padding}")
    return options


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument('file', type=click.Path(dir_okay=False))
@click.option('--zoom', '-z', type=float, help='Fixed tile zoom level, truncated to a whole number (skips automatic zoom)')
@click.option('--bbox', '-b', help='Render frame as "minX,minY,maxX,maxY" (no padding)')
@click.option('--tile', '-t', help='Render frame as the bounds of tile "x/y/z" (no padding)')
@click.option('--frame', '-f', type=click.IntRange(min=0), help='Tiles of padding around the data (default 1)')
@click.option('--mod', '-m', type=int, help='Overzoom: added to the selected zoom')
@click.option('--nocolor', is_flag=True, help='Plain characters without ANSI colors')
@click.option('--config', '-c', default='geotype.yaml', help='Config file path')
@click.version_option(__version__, prog_name='geotype')
def main(file: str, zoom: Optional[float], bbox: Optional[str], tile: Optional[str],
         frame: Optional[int], mod: Optional[int], nocolor: bool, config: str):
    """Render a GeoJSON file as a grid of map tiles.

    FILE: GeoJSON Feature, FeatureCollection or Geometry

    Polygons are drawn as XX, lines as ## and points as <>, each cell being
    one web-mercator tile at a zoom chosen to fit the terminal.
    """
    if bbox and tile:
        raise click.UsageError("--bbox and --tile cannot be used together")

    console = Console(stderr=True)
    try:
        config_data = load_config(config)
        options = build_options(config_data, zoom=zoom, bbox=bbox, tile=tile,
                                frame=frame, mod=mod, nocolor=nocolor)
        features = load_geojson(file)
        output = render_map(features, options)
    except GeotypeError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        sys.exit(1)

    click.echo(output, nl=False, color=True)


if __name__ == '__main__':
    main()
