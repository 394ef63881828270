"""
Pydantic models for API request/response validation.

Wire format is camelCase to match the persisted prompt document.
"""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, Dict, Any, List, Literal


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase field names."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ModelConfigSchema(CamelModel):
    """Recognized model options. Omitted options are not sent."""
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    max_output_tokens: Optional[int] = Field(default=None, gt=0)
    top_p: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    top_k: Optional[int] = Field(default=None, gt=0)

    def supplied(self) -> Dict[str, Any]:
        """Only the options the caller actually provided, in wire form."""
        return self.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)


# Response Models

class PromptResponse(CamelModel):
    """Response model for a stored prompt."""
    id: str
    name: str
    prompt_text: str
    prompt_config: Dict[str, Any] = Field(default_factory=dict, alias="modelConfig")
    created_at: str
    updated_at: str
    is_active: bool = True


class PromptEnvelope(BaseModel):
    """Single prompt response."""
    success: bool = True
    data: PromptResponse
    message: Optional[str] = None


class PromptListEnvelope(BaseModel):
    """Prompt list response."""
    success: bool = True
    data: List[PromptResponse]
    count: int


class GenerationData(CamelModel):
    """Generated post with its length check."""
    text: str
    character_count: int
    exceeds_limit: bool
    metadata: Dict[str, Any] = Field(default_factory=dict)


class GenerationEnvelope(BaseModel):
    """Generation response."""
    success: bool = True
    data: GenerationData


class MessageResponse(BaseModel):
    """Generic message response."""
    success: bool = True
    message: str


class ErrorResponse(BaseModel):
    """Response model for errors."""
    success: bool = False
    error: str
    message: str


# Request Models

class CreatePromptRequest(CamelModel):
    """Request model for creating a prompt."""
    name: str
    prompt_text: str
    prompt_config: Optional[ModelConfigSchema] = Field(default=None, alias="modelConfig")


class UpdatePromptRequest(CamelModel):
    """Request model for updating a prompt. All fields optional."""
    name: Optional[str] = None
    prompt_text: Optional[str] = None
    prompt_config: Optional[ModelConfigSchema] = Field(default=None, alias="modelConfig")
    is_active: Optional[bool] = None


class GeneratePostRequest(CamelModel):
    """Request model for generation with a stored prompt."""
    system_prompt_id: str
    user_input: str
    custom_config: Optional[ModelConfigSchema] = None
    provider: Optional[Literal["gemini", "openrouter"]] = None


class GenerateRequest(CamelModel):
    """Request model for generation with the built-in prompt."""
    user_input: str
    provider: Optional[Literal["gemini", "openrouter"]] = None
