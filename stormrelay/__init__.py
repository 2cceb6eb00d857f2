"""Storm relay: weather warnings and lightning alerts over a mesh radio."""

__version__ = "0.1.0"
