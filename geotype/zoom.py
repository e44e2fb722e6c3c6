"""
Automatic zoom selection.

Finds the lowest zoom at which a bounding box spans more tiles than the
character grid is meant to hold, so the rendered map roughly fills a
standard terminal window (two characters per tile).
"""

import sys
from typing import Tuple

from shapely.geometry import LineString, Point

from .options import DEFAULT_COLUMNS, DEFAULT_ROWS, RenderOptions
from .tiles import BBox, geometry_tiles

MIN_ZOOM = 3
MAX_ZOOM = 27


def _edge(start: Tuple[float, float], end: Tuple[float, float]):
    if start == end:
        return Point(start)
    return LineString([start, end])


def tile_span(bbox: BBox, zoom: int) -> Tuple[int, int]:
    """Return the (x, y) tile-index spans of a bbox's bottom and left edges."""
    bottom = geometry_tiles(_edge((bbox.west, bbox.south), (bbox.east, bbox.south)), zoom)
    left = geometry_tiles(_edge((bbox.west, bbox.south), (bbox.west, bbox.north)), zoom)

    xs = [t.x for t in bottom]
    ys = [t.y for t in left]
    return max(xs) - min(xs), max(ys) - min(ys)


def find_zoom(bbox: BBox, max_columns: int = DEFAULT_COLUMNS,
              max_rows: int = DEFAULT_ROWS) -> Tuple[int, bool]:
    """Search for the first zoom whose tile span overflows the grid.

    Only the bottom and left edges of the bbox are covered at each trial
    zoom; their tile spans are all the fit test needs.

    Returns:
        (zoom, exact). ``exact`` is False when no zoom up to MAX_ZOOM
        overflowed the grid and MAX_ZOOM is returned as a best effort.
    """
    for zoom in range(MIN_ZOOM, MAX_ZOOM + 1):
        diff_x, diff_y = tile_span(bbox, zoom)
        if diff_x > max_columns or diff_y > max_rows:
            return zoom, True
    return MAX_ZOOM, False


def select_zoom(bbox: BBox, options: RenderOptions) -> int:
    """Pick the render zoom for a bbox under the given RenderOptions.

    An explicit positive ``options.zoom`` skips the search. The overzoom
    offset is applied last; the result never drops below zero.
    """
    if options.zoom is not None and options.zoom > 0:
        zoom = options.zoom
    else:
        zoom, exact = find_zoom(bbox, options.max_columns, options.max_rows)
        if not exact:
            print(f"Warning: Data extent fits the grid at every zoom up to {MAX_ZOOM}, "
                  f"rendering at zoom {MAX_ZOOM} as an approximation", file=sys.stderr)

    return max(0, zoom + options.overzoom)
