"""
mapdiff.errors — Exception hierarchy.

Comparison itself never raises: every pair of acyclic values yields a
patch.  Errors only arise at the edges, when patches are converted to
or rebuilt from their plain/JSON form.
"""


class MapDiffError(Exception):
    """Base class for errors raised by mapdiff."""


class PatchFormatError(MapDiffError):
    """A patch could not be serialized, or serialized data is not a valid patch."""

    def __init__(self, message: str, path: tuple = ()):
        self.path = path
        if path:
            path_str = "/".join(str(p) for p in path)
            message = f"{message} (at {path_str})"
        super().__init__(message)
