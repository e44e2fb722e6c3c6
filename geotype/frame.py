"""Resolution of the geographic area to render."""

from typing import List, NamedTuple, Optional, Union

import mercantile
from shapely.geometry import box

from .errors import GeometryError
from .geojson_input import Feature, explode
from .tiles import BBox, Tile, tile_bbox


class ResolvedFrame(NamedTuple):
    """Features to render and the geographic extent they are framed in.

    ``explicit`` is True when the extent came from a user bbox or tile, in
    which case the grid is drawn for exactly that extent.
    """
    features: List[Feature]
    bbox: BBox
    explicit: bool


def collection_bbox(features: List[Feature]) -> BBox:
    """Return the bounding box of all features."""
    if not features:
        raise GeometryError("No geometries to render")

    bounds = [f.geometry.bounds for f in features]
    return BBox(
        min(b[0] for b in bounds),
        min(b[1] for b in bounds),
        max(b[2] for b in bounds),
        max(b[3] for b in bounds),
    )


def resolve_frame(features: List[Feature],
                  override: Optional[Union[BBox, Tile, mercantile.Tile]] = None) -> ResolvedFrame:
    """Determine the extent to render and clip features to it.

    Without an override the extent is the bounds of all features. With a
    bbox or tile override every feature is intersected with that area;
    features left empty are dropped, and the rest keep only their clipped
    parts, each tagged by the type of the clipped geometry.
    """
    if override is None:
        return ResolvedFrame(list(features), collection_bbox(features), False)

    bbox = override if isinstance(override, BBox) else tile_bbox(override)
    clip_box = box(*bbox)

    clipped = []
    for feature in features:
        geom = feature.geometry.intersection(clip_box)
        if geom.is_empty:
            continue
        for part in explode(geom):
            clipped.append(Feature(part, feature.properties, feature.index))

    return ResolvedFrame(clipped, bbox, True)
