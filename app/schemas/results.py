"""Analysis result model projected from the upstream content list."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.core.constants import RESULT_FIELD_MAP


class AnalysisResult(BaseModel):
    """One emotion-analysis result.

    Every field defaults to an empty string so that a sparse
    upstream entry never fails the mapping.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    classification: str = Field(
        default="",
        description="Emotion label assigned to the recording",
    )
    filter: str = Field(
        default="",
        description="Filter label applied by the upstream analyser",
    )
    original_file_name: str = Field(
        default="",
        description="File name as originally uploaded",
    )
    start_offset: str = Field(
        default="",
        description="Start of the analysed segment",
    )
    end_offset: str = Field(
        default="",
        description="End of the analysed segment",
    )

    @classmethod
    def from_upstream(cls, entry: Any) -> AnalysisResult:
        """Project an upstream content entry into an ``AnalysisResult``.

        Non-dict entries and missing or null fields map to empty
        strings; other scalars are stringified.

        Args:
            entry: One element of the upstream ``data.content`` list.

        Returns:
            The projected result.
        """
        if not isinstance(entry, dict):
            return cls()
        values = {}
        for upstream_key, field_name in RESULT_FIELD_MAP.items():
            value = entry.get(upstream_key)
            values[field_name] = "" if value is None else str(value)
        return cls(**values)
