"""Document identity, editor token and upload lifecycle broker."""

__version__ = "0.1.0"
