"""Build MagikaResult records from labels and content-type metadata."""

from typing import Optional

from filesense.content_types import ContentTypesManager
from filesense.models import MagikaOutputFields, MagikaResult, ModelOutputFields
from filesense.models.content_type import PATH_PLACEHOLDER


class ResultComposer:
    """Merges raw and final labels with metadata from the content-type table."""

    def __init__(self, content_types: ContentTypesManager):
        self._ctm = content_types

    def compose(
        self,
        path: str,
        dl_ct_label: Optional[str],
        score: float,
        output_ct_label: str,
        link_target: Optional[str] = None,
    ) -> MagikaResult:
        """Return the result for one input.

        Args:
            path: Input path, or ``-`` for in-memory content
            dl_ct_label: Raw model label, None when inference was skipped
            score: Model score, or 1.0 for fast-path decisions
            output_ct_label: Final label after the decision policy
            link_target: Resolved symlink target substituted for ``<path>``
        """
        ctm = self._ctm

        if dl_ct_label is None:
            dl = ModelOutputFields()
        else:
            dl = ModelOutputFields(
                ct_label=dl_ct_label,
                score=score,
                group=ctm.get_group(dl_ct_label),
                mime_type=ctm.get_mime_type(dl_ct_label),
                magic=ctm.get_magic(dl_ct_label),
                description=ctm.get_description(dl_ct_label),
            )

        magic = ctm.get_magic(output_ct_label)
        description = ctm.get_description(output_ct_label)
        if link_target is not None:
            magic = magic.replace(PATH_PLACEHOLDER, link_target)
            description = description.replace(PATH_PLACEHOLDER, link_target)

        output = MagikaOutputFields(
            ct_label=output_ct_label,
            score=score,
            group=ctm.get_group(output_ct_label),
            mime_type=ctm.get_mime_type(output_ct_label),
            magic=magic,
            description=description,
        )
        return MagikaResult(path=path, dl=dl, output=output)
