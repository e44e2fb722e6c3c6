"""Exceptions raised while loading and rendering GeoJSON."""


class GeotypeError(Exception):
    """Base class for errors that abort a render."""


class InputError(GeotypeError):
    """The input file or a command-line value could not be used."""


class GeometryError(GeotypeError):
    """A feature's geometry cannot be rendered."""
