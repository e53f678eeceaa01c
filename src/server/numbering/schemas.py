"""Pydantic models for numbering requests and responses."""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class NumberingOptions(BaseModel):
    mode: Literal["counter", "text"] = "counter"
    on_malformed: Literal["abort", "unnumbered"] = "abort"


class DiagnosticModel(BaseModel):
    code: str
    message: str
    ordinal: Optional[int] = None
    severity: str = "warning"


class ParagraphNumbering(BaseModel):
    ordinal: int
    num_id: Optional[str] = None
    level: Optional[int] = None
    abstract_id: Optional[str] = None
    text: Optional[str] = None
    format: Optional[str] = None
    paragraph_id: Optional[str] = None


class NumberingResponse(BaseModel):
    html: str
    css: str
    diagnostics: List[DiagnosticModel] = Field(default_factory=list)
    report: Dict[str, Any] = Field(default_factory=dict)
    contexts: Optional[List[ParagraphNumbering]] = None
