#!/usr/bin/env python3
"""
Tile grid renderer for GeoJSON features.
Draws every tile of the frame as a two-character glyph chosen by the
geometry type covering it, optionally colored with ANSI escape codes.
"""

from typing import Dict, List, NamedTuple, Optional, Tuple

from .errors import GeometryError
from .frame import resolve_frame
from .geojson_input import Feature
from .options import RenderOptions
from .tiles import BBox, GeometryType, Tile, point_tile, rasterize
from .zoom import select_zoom

RESET = '\033[0m'

# Glyph and ANSI style for each kind of cell. Foreground matches background
# so colored cells read as solid blocks; the characters differ per kind so
# the grid is still readable without color.
POLYGON_GLYPH = ('XX', '\033[32;42m')   # green on green
LINE_GLYPH = ('##', '\033[30;40m')      # black on black
POINT_GLYPH = ('<>', '\033[31;41m')     # red on red
BLANK_GLYPH = ('  ', '\033[44m')        # blue background

GLYPHS = {
    GeometryType.POLYGON: POLYGON_GLYPH,
    GeometryType.MULTI_POLYGON: POLYGON_GLYPH,
    GeometryType.LINE_STRING: LINE_GLYPH,
    GeometryType.MULTI_LINE_STRING: LINE_GLYPH,
    GeometryType.POINT: POINT_GLYPH,
    GeometryType.MULTI_POINT: POINT_GLYPH,
}

# Nudge applied to east/south edges that sit exactly on a tile boundary
EDGE_EPSILON = 1e-11


class Frame(NamedTuple):
    """Inclusive tile rectangle drawn to the grid."""
    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @property
    def columns(self) -> int:
        return self.max_x - self.min_x + 1

    @property
    def rows(self) -> int:
        return self.max_y - self.min_y + 1


class MapRenderer:
    """Renders rasterized tiles as a character grid."""

    def __init__(self, color: bool = True, padding: int = 1):
        """Initialize the renderer.

        Args:
            color: Wrap each cell in ANSI color codes
            padding: Blank tiles added around the covered tiles when the
                     frame is computed from the tiles themselves
        """
        self.color = color
        self.padding = padding

    def build_index(self, tiles: List[Tile]) -> Dict[Tuple[int, int], GeometryType]:
        """Map each (x, y) to its geometry type.

        Tiles are applied in order, so when several features cover the same
        tile the one rasterized last decides the glyph.
        """
        index = {}
        for tile in tiles:
            index[(tile.x, tile.y)] = tile.tag
        return index

    def compute_frame(self, tiles: List[Tile], zoom: int,
                      bbox: Optional[BBox] = None) -> Tuple[Frame, List[Tile]]:
        """Work out the tile rectangle to draw.

        With an explicit ``bbox`` the frame is exactly the tiles between its
        top-left and bottom-right corners, and tiles outside are dropped.
        Otherwise the frame is the covered tiles' bounds grown by the
        padding.

        Returns:
            (frame, tiles inside the frame)
        """
        if bbox is not None:
            east = max(bbox.west, bbox.east - EDGE_EPSILON)
            south = min(bbox.north, bbox.south + EDGE_EPSILON)
            top_left = point_tile(bbox.west, bbox.north, zoom)
            bottom_right = point_tile(east, south, zoom)
            frame = Frame(top_left.x, top_left.y, bottom_right.x, bottom_right.y)
            inside = [t for t in tiles
                      if frame.min_x <= t.x <= frame.max_x and frame.min_y <= t.y <= frame.max_y]
            return frame, inside

        if not tiles:
            raise GeometryError("No tiles to render")

        xs = [t.x for t in tiles]
        ys = [t.y for t in tiles]
        frame = Frame(
            min(xs) - self.padding,
            min(ys) - self.padding,
            max(xs) + self.padding,
            max(ys) + self.padding,
        )
        return frame, tiles

    def render(self, tiles: List[Tile], zoom: int, bbox: Optional[BBox] = None) -> str:
        """Render tiles to a text block, one line per tile row."""
        frame, tiles = self.compute_frame(tiles, zoom, bbox)
        index = self.build_index(tiles)

        lines = []
        for y in range(frame.min_y, frame.max_y + 1):
            row = ''.join(self._cell(index.get((x, y)))
                          for x in range(frame.min_x, frame.max_x + 1))
            lines.append(row + '\n')
        return ''.join(lines)

    def _cell(self, tag: Optional[GeometryType]) -> str:
        glyph, style = GLYPHS[tag] if tag is not None else BLANK_GLYPH
        if self.color:
            return style + glyph + RESET
        return glyph


def render_map(features: List[Feature], options: RenderOptions) -> str:
    """Convenience function to render features under RenderOptions.

    Resolves the frame, picks the zoom, rasterizes and draws the grid.
    """
    resolved = resolve_frame(features, options.frame_override)
    zoom = select_zoom(resolved.bbox, options)
    tiles = rasterize(resolved.features, zoom)

    renderer = MapRenderer(color=options.color, padding=options.frame_padding)
    return renderer.render(tiles, zoom, resolved.bbox if resolved.explicit else None)
