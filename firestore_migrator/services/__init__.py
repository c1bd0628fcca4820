"""Source, destination and record-shaping services for the migration."""

__all__ = [
    "destination",
    "field_mapper",
    "sink",
    "source",
    "timestamps",
    "transformers",
]
