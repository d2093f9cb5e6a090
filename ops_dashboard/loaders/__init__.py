"""Import loaders for dashboard data files."""

from .payload import ImportPayload, load_import_file, parse_import_payload

__all__ = [
    "ImportPayload",
    "load_import_file",
    "parse_import_payload",
]
