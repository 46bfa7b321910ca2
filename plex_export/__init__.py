"""Export a Plex library's metadata and artwork into a mirrored folder tree."""

__version__ = "1.0.0"
