"""Content type records as stored in the content-type table."""

from dataclasses import dataclass, field
from typing import Any, Optional

# The tool returned unknown, '', None, or similar
UNKNOWN = "unknown"
UNKNOWN_MIME_TYPE = "application/unknown"
UNKNOWN_CONTENT_TYPE_GROUP = "unknown"
UNKNOWN_MAGIC = "Unknown"
UNKNOWN_DESCRIPTION = "Unknown type"

UNSUPPORTED = "unsupported"
ERROR = "error"
MISSING = "missing"
EMPTY = "empty"
CORRUPTED = "corrupted"
TIMEOUT = "timeout"
NOT_VALID = "not_valid"
FILE_DOES_NOT_EXIST = "file_does_not_exist"
PERMISSION_ERROR = "permission_error"
DIRECTORY = "directory"
SYMLINK = "symlink"
GENERIC_TEXT = "txt"

SPECIAL_CONTENT_TYPES = [
    UNKNOWN,
    UNSUPPORTED,
    ERROR,
    MISSING,
    EMPTY,
    CORRUPTED,
    NOT_VALID,
    PERMISSION_ERROR,
    GENERIC_TEXT,
]

# Token substituted with the resolved target in symlink magic/description
PATH_PLACEHOLDER = "<path>"


@dataclass(frozen=True)
class ContentType:
    """A content type and its descriptive metadata.

    Tags derived from datasets and target labels (``dataset:<name>``,
    ``model_target_label:<label>``, ...) are added by ``from_dict`` so that
    they can be queried like explicit tags.
    """

    name: str
    extensions: tuple[str, ...] = ()
    mime_type: Optional[str] = None
    group: Optional[str] = None
    magic: Optional[str] = None
    description: Optional[str] = None
    vt_type: Optional[str] = None
    datasets: tuple[str, ...] = ()
    parent: Optional[str] = None
    tags: tuple[str, ...] = ()
    model_target_label: Optional[str] = None
    target_label: Optional[str] = None
    correct_labels: tuple[str, ...] = ()
    in_scope_for_output_content_type: bool = False

    @property
    def is_text(self) -> bool:
        return "text" in self.tags

    @property
    def in_scope_for_training(self) -> bool:
        return bool(
            self.datasets
            and self.model_target_label is not None
            and self.target_label is not None
            and self.correct_labels
        )

    @classmethod
    def from_dict(cls, info: dict[str, Any], add_automatic_tags: bool = True) -> "ContentType":
        """Build a ContentType from one entry of the content-type table."""
        datasets = tuple(info.get("datasets") or ())
        correct_labels = tuple(info.get("correct_labels") or ())
        model_target_label = info.get("model_target_label")
        target_label = info.get("target_label")

        tags = list(info.get("tags") or ())
        if add_automatic_tags:
            tags.extend(f"dataset:{d}" for d in datasets)
            if model_target_label:
                tags.append(f"model_target_label:{model_target_label}")
            if target_label:
                tags.append(f"target_label:{target_label}")
            tags.extend(f"correct_label:{c}" for c in correct_labels)

        return cls(
            name=info["name"],
            extensions=tuple(info.get("extensions") or ()),
            mime_type=info.get("mime_type"),
            group=info.get("group"),
            magic=info.get("magic"),
            description=info.get("description"),
            vt_type=info.get("vt_type"),
            datasets=datasets,
            parent=info.get("parent"),
            tags=tuple(tags),
            model_target_label=model_target_label,
            target_label=target_label,
            correct_labels=correct_labels,
            in_scope_for_output_content_type=bool(
                info.get("in_scope_for_output_content_type", False)
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "extensions": list(self.extensions),
            "mime_type": self.mime_type,
            "group": self.group,
            "magic": self.magic,
            "description": self.description,
            "vt_type": self.vt_type,
            "datasets": list(self.datasets),
            "parent": self.parent,
            "tags": list(self.tags),
            "model_target_label": self.model_target_label,
            "target_label": self.target_label,
            "correct_labels": list(self.correct_labels),
            "in_scope_for_output_content_type": self.in_scope_for_output_content_type,
            "in_scope_for_training": self.in_scope_for_training,
        }

    def __str__(self) -> str:
        return f"<{self.name}>"


__all__ = [
    "ContentType",
    "SPECIAL_CONTENT_TYPES",
    "PATH_PLACEHOLDER",
    "UNKNOWN",
    "UNKNOWN_MIME_TYPE",
    "UNKNOWN_CONTENT_TYPE_GROUP",
    "UNKNOWN_MAGIC",
    "UNKNOWN_DESCRIPTION",
    "UNSUPPORTED",
    "ERROR",
    "MISSING",
    "EMPTY",
    "CORRUPTED",
    "TIMEOUT",
    "NOT_VALID",
    "FILE_DOES_NOT_EXIST",
    "PERMISSION_ERROR",
    "DIRECTORY",
    "SYMLINK",
    "GENERIC_TEXT",
]
