from pydantic import BaseModel, ConfigDict, Field

class BaseDTO(BaseModel):
    """
    Base class for every IVS DTO (Data Transfer Object).

    Features:
        - from_attributes=True (build from plain objects)
        - str_strip_whitespace=True (strip surrounding whitespace on strings)
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        populate_by_name=True
    )


# -------------------------------------------------------------------------
# Setup Intake DTOs
# -------------------------------------------------------------------------
PDF_CONTENT_TYPE = "application/pdf"

class CVDocumentDTO(BaseDTO):
    filename: str
    content_type: str
    content: bytes = Field(repr=False)

    @property
    def is_pdf(self) -> bool:
        return self.content_type == PDF_CONTENT_TYPE


# -------------------------------------------------------------------------
# Coding Evaluator DTOs
# -------------------------------------------------------------------------
class CodingFeedbackDTO(BaseDTO):
    score: float
    feedback: str
