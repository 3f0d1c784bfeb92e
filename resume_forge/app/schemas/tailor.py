import logging

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from resume_forge.app.llm.models import ImprovementTip, KeywordMatches, ResumeChanges

log = logging.getLogger(__name__)


class TailorRequest(BaseModel):
    """Schema for a generation request.

    Attributes:
        job_description (str): The job description to tailor towards.
        resume_section (str): The resume section to tailor.
        section_type (str | None): Optional section label, e.g. "experience".
        industry (str | None): Optional industry for terminology guidance.

    Notes:
        1. Blank values are accepted here and rejected by the coordinator with
           `InvalidInput`, so every validation failure has the same error shape.

    """

    job_description: str = ""
    resume_section: str = ""
    section_type: str | None = None
    industry: str | None = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TailorResponse(BaseModel):
    """Schema for a successful generation.

    Attributes:
        tailored_text (str): The tailored resume section.
        keyword_matches (KeywordMatches): Keyword analysis.
        improvement_tips (list[ImprovementTip]): Suggestions.
        changes (ResumeChanges): What was changed.
        degraded (bool): True when the analysis fields are empty fallbacks.

    """

    tailored_text: str
    keyword_matches: KeywordMatches = Field(default_factory=KeywordMatches)
    improvement_tips: list[ImprovementTip] = Field(default_factory=list)
    changes: ResumeChanges = Field(default_factory=ResumeChanges)
    degraded: bool = False

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
