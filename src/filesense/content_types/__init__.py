"""Content-type table access."""

from filesense.content_types.manager import ContentTypesManager

__all__ = ["ContentTypesManager"]
