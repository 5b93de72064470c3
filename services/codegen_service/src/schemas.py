from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

class GenerateRequest(BaseModel):
    # Checked for emptiness in the service so a missing prompt maps to 400, not 422
    prompt: Optional[str] = Field(default=None, description="Natural-language description of the code to write")
    models: Optional[List[str]] = Field(default=None, description="Ordered fallback list of model ids; server default when empty")

    @field_validator("models", mode="before")
    @classmethod
    def _split_models(cls, value):
        # Form posts send either repeated fields or one comma-separated string
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, list):
            value = [str(v).strip() for v in value if v is not None and str(v).strip()]
        return value

class GenerateResponse(BaseModel):
    success: bool = True
    model: str = Field(..., description="Model that produced the code")
    clean_code: str = Field(..., description="Code extracted from the model answer")

class ErrorResponse(BaseModel):
    error: str
    model: Optional[str] = None
