import logging

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

log = logging.getLogger(__name__)


class _CamelModel(BaseModel):
    """Accepts camelCase keys from the model output and snake_case from Python callers."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class KeywordMatches(_CamelModel):
    """Job-description keywords found in, and missing from, the resume section."""

    matched: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)
    match_percentage: float = 0


class ImprovementTip(_CamelModel):
    """A single suggestion for improving the resume section."""

    tip: str
    category: str = "general"
    priority: str = "medium"


class ResumeChanges(_CamelModel):
    """A summary of what the tailoring changed."""

    added: list[str] = Field(default_factory=list)
    modified: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)


class TailoredResume(_CamelModel):
    """The structured result of a successful generation.

    Attributes:
        tailored_resume (str): The tailored resume section. Never empty.
        keyword_matches (KeywordMatches): Keyword analysis against the job description.
        improvement_tips (list[ImprovementTip]): Suggestions for further improvement.
        changes (ResumeChanges): What the tailoring added or modified.
        degraded (bool): True when the model output was not valid structured JSON and the
            collections above are empty placeholders rather than real analysis.

    """

    tailored_resume: str = Field(..., min_length=1)
    keyword_matches: KeywordMatches = Field(default_factory=KeywordMatches)
    improvement_tips: list[ImprovementTip] = Field(default_factory=list)
    changes: ResumeChanges = Field(default_factory=ResumeChanges)
    degraded: bool = False
