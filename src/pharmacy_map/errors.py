"""Exceptions raised by the pipeline when input data cannot be used."""


class InvalidCoordinateError(ValueError):
    """Longitude/latitude values that cannot be parsed or are out of range."""


class InvalidGeometryError(ValueError):
    """Polygons that fail validation, e.g. rings that are not closed."""


class EmptyJoinError(ValueError):
    """A spatial or attribute join that matched no records at all."""
