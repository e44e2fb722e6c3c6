"""Options shared by every stage of the render pipeline."""

from dataclasses import dataclass
from typing import Optional, Union

import mercantile

from .tiles import BBox

# Grid size in tiles
DEFAULT_COLUMNS = 30
DEFAULT_ROWS = 23


@dataclass(frozen=True)
class RenderOptions:
    """Everything the render pipeline needs from the command line."""
    zoom: Optional[int] = None
    frame_override: Optional[Union[BBox, mercantile.Tile]] = None
    overzoom: int = 0
    frame_padding: int = 1
    color: bool = True
    max_columns: int = DEFAULT_COLUMNS
    max_rows: int = DEFAULT_ROWS
