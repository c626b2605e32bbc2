"""Read-only access to the content-type table."""

import json
import logging
from collections import defaultdict
from importlib import resources
from pathlib import Path
from typing import Iterable, Optional

from filesense.config import CONTENT_TYPES_FILE_NAME
from filesense.exceptions import ContentTypeError, ModelLoadError
from filesense.models.content_type import (
    SPECIAL_CONTENT_TYPES,
    UNKNOWN_CONTENT_TYPE_GROUP,
    UNKNOWN_DESCRIPTION,
    UNKNOWN_MAGIC,
    UNKNOWN_MIME_TYPE,
    ContentType,
)

logger = logging.getLogger(__name__)


class ContentTypesManager:
    """Lookup table from label to ContentType, plus tag and extension indexes.

    The table is loaded once and never mutated, so one instance can be shared
    by any number of pipelines.
    """

    def __init__(self, content_types: Iterable[ContentType]):
        self._cts: dict[str, ContentType] = {}
        self._tag2cts: dict[str, list[ContentType]] = defaultdict(list)
        self._ext2cts: dict[str, list[ContentType]] = defaultdict(list)

        for ct in content_types:
            self._cts[ct.name] = ct
            for tag in ct.tags:
                self._tag2cts[tag].append(ct)
            for ext in ct.extensions:
                self._ext2cts[ext].append(ct)

    @classmethod
    def from_dict(cls, data: dict, add_automatic_tags: bool = True) -> "ContentTypesManager":
        return cls(ContentType.from_dict(info, add_automatic_tags) for info in data.values())

    @classmethod
    def from_file(cls, path: Path | str) -> "ContentTypesManager":
        """Load a content-type table from a JSON file."""
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ModelLoadError(f"Cannot read content types from {path}: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def load_default(cls) -> "ContentTypesManager":
        """Load the content-type table bundled with the package."""
        resource = resources.files("filesense").joinpath("data", CONTENT_TYPES_FILE_NAME)
        try:
            data = json.loads(resource.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ModelLoadError(f"Cannot read bundled content types: {e}") from e
        manager = cls.from_dict(data)
        logger.debug(f"Loaded {len(manager)} content types")
        return manager

    def __len__(self) -> int:
        return len(self._cts)

    def __contains__(self, label: str) -> bool:
        return label in self._cts

    def get(self, label: str) -> Optional[ContentType]:
        return self._cts.get(label)

    def get_or_raise(self, label: Optional[str]) -> ContentType:
        if not label:
            raise ContentTypeError("Content type label is empty")
        ct = self.get(label)
        if ct is None:
            raise ContentTypeError(f'Could not get a ContentType for "{label}"')
        return ct

    def get_mime_type(self, label: str, default: Optional[str] = None) -> str:
        ct = self.get(label)
        if ct is None or ct.mime_type is None:
            return default or UNKNOWN_MIME_TYPE
        return ct.mime_type

    def get_group(self, label: str, default: Optional[str] = None) -> str:
        ct = self.get(label)
        if ct is None or ct.group is None:
            return default or UNKNOWN_CONTENT_TYPE_GROUP
        return ct.group

    def get_magic(
        self, label: str, default: Optional[str] = None, fallback_to_label: bool = True
    ) -> str:
        ct = self.get(label)
        if ct is None or ct.magic is None:
            return label if fallback_to_label else (default or UNKNOWN_MAGIC)
        return ct.magic

    def get_description(
        self, label: str, default: Optional[str] = None, fallback_to_label: bool = True
    ) -> str:
        ct = self.get(label)
        if ct is None or ct.description is None:
            return label if fallback_to_label else (default or UNKNOWN_DESCRIPTION)
        return ct.description

    def is_text(self, label: str) -> bool:
        """Whether the label is tagged as text. Unknown labels count as binary."""
        ct = self.get(label)
        return ct is not None and ct.is_text

    def get_cts_by_ext(self, ext: str) -> list[ContentType]:
        return list(self._ext2cts.get(ext, []))

    def get_cts_by_ext_or_raise(self, ext: str) -> list[ContentType]:
        cts = self.get_cts_by_ext(ext)
        if not cts:
            raise ContentTypeError(f'Could not find ContentType for extension "{ext}"')
        return cts

    def get_valid_tags(self, only_explicit: bool = True) -> list[str]:
        """Return known tags, skipping automatic ``*_label:`` and ``dataset:`` tags by default."""
        tags = self._tag2cts.keys()
        if only_explicit:
            tags = [
                t
                for t in tags
                if not t.split(":")[0].endswith("_label") and not t.startswith("dataset")
            ]
        return sorted(tags)

    def is_valid_ct_label(self, label: str) -> bool:
        return label in self._cts or label in SPECIAL_CONTENT_TYPES

    def is_valid_tag(self, tag: str) -> bool:
        return tag in self._tag2cts

    def select(
        self, query: Optional[str] = None, must_be_in_scope_for_training: bool = True
    ) -> list[ContentType]:
        return [
            self.get_or_raise(name)
            for name in self.select_names(query, must_be_in_scope_for_training)
        ]

    def select_names(
        self, query: Optional[str] = None, must_be_in_scope_for_training: bool = True
    ) -> list[str]:
        """Select content type names with a comma-separated query.

        Each entry adds or removes names, left to right:
        ``*`` or ``all`` adds everything, ``tag:x`` adds types tagged ``x``,
        ``-tag:x`` removes them, ``-label`` removes one type and ``label``
        adds one.
        """
        names: set[str] = set()
        if not query:
            for ct in self._cts.values():
                if must_be_in_scope_for_training and not ct.in_scope_for_training:
                    continue
                names.add(ct.name)
            return sorted(names)

        for entry in query.split(","):
            entry = entry.strip()
            if entry in ("*", "all"):
                names.update(self.select_names(None, must_be_in_scope_for_training))
            elif entry.startswith("tag:"):
                tag = entry[len("tag:"):]
                self._check_tag(tag)
                for ct in self._tag2cts[tag]:
                    if must_be_in_scope_for_training and not ct.in_scope_for_training:
                        continue
                    names.add(ct.name)
            elif entry.startswith("-tag:"):
                tag = entry[len("-tag:"):]
                self._check_tag(tag)
                for ct in self._tag2cts[tag]:
                    names.discard(ct.name)
            elif entry.startswith("-"):
                label = entry[1:]
                self._check_label(label)
                names.discard(label)
            else:
                self._check_label(entry)
                if must_be_in_scope_for_training:
                    ct = self.get(entry)
                    if ct is None or not ct.in_scope_for_training:
                        raise ContentTypeError(f'"{entry}" is not in scope for training')
                names.add(entry)
        return sorted(names)

    def get_content_types_space(self) -> list[str]:
        """All possible content type names, including special ones."""
        names = set(self.select_names(must_be_in_scope_for_training=False))
        names.update(SPECIAL_CONTENT_TYPES)
        return sorted(names)

    def get_output_content_types(self) -> list[ContentType]:
        """Sorted ContentType objects that can appear as an output label."""
        outputs = {
            ct.target_label: self.get_or_raise(ct.target_label)
            for ct in self.select(must_be_in_scope_for_training=False)
            if ct.in_scope_for_output_content_type and ct.target_label
        }
        return [outputs[name] for name in sorted(outputs)]

    def get_output_content_types_names(self) -> list[str]:
        return [ct.name for ct in self.get_output_content_types()]

    def get_invalid_labels(self, labels: Iterable[str]) -> list[str]:
        return sorted({label for label in labels if not self.is_valid_ct_label(label)})

    def _check_tag(self, tag: str) -> None:
        if not self.is_valid_tag(tag):
            valid = ", ".join(sorted(self._tag2cts))
            raise ContentTypeError(f'"{tag}" is not a valid tag. Valid tags: {valid}.')

    def _check_label(self, label: str) -> None:
        if not self.is_valid_ct_label(label):
            raise ContentTypeError(f'"{label}" is not a valid content type label')
