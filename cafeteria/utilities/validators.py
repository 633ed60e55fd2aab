"""
Input validation schemas using Pydantic for better data integrity.
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import date, datetime

from cafeteria.domain.Segment import Segment


class ReceivingLineInput(BaseModel):
    """Schema for one line of a goods receipt."""
    item_id: str = Field(..., min_length=1)
    quantity: float = Field(..., gt=0)
    expiration_date: Optional[date] = None

    @field_validator('expiration_date', mode='before')
    @classmethod
    def blank_as_none(cls, v):
        """Empty form fields mean 'no expiration date'."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class QualityCheckInput(BaseModel):
    packaging_ok: bool = True
    temperature_ok: bool = True
    notes: Optional[str] = None


class ReceivingInput(BaseModel):
    """Schema for a goods receipt submission."""
    supplier: str = Field(..., min_length=1, max_length=200)
    invoice_number: str = Field(..., min_length=1, max_length=100)
    items: List[ReceivingLineInput]
    qc_check: QualityCheckInput = Field(default_factory=QualityCheckInput)
    date: Optional[datetime] = None

    @field_validator('supplier', 'invoice_number', mode='before')
    @classmethod
    def strip_whitespace(cls, v):
        """Remove leading/trailing whitespace."""
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator('items')
    @classmethod
    def validate_items(cls, v):
        """Ensure the receipt has at least one line."""
        if not v:
            raise ValueError('Receipt must have at least one item')
        return v


class ReceivingHeaderUpdate(BaseModel):
    date: Optional[datetime] = None
    supplier: Optional[str] = Field(None, min_length=1, max_length=200)
    invoice_number: Optional[str] = Field(None, min_length=1, max_length=100)
    qc_check: Optional[QualityCheckInput] = None


class ReceivingLineUpdate(BaseModel):
    quantity: float = Field(..., ge=0)
    expiration_date: Optional[date] = None

    @field_validator('expiration_date', mode='before')
    @classmethod
    def blank_as_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ItemDefinitionInput(BaseModel):
    """Schema for creating an inventory item definition."""
    name: str = Field(..., min_length=1, max_length=100)
    category: str = Field(..., min_length=1, max_length=100)
    unit: str = Field(..., min_length=1, max_length=20)
    min_stock: float = Field(0, ge=0)
    standard_measure: Optional[str] = None
    measure_weight: Optional[float] = Field(None, gt=0)
    code: Optional[str] = None

    @field_validator('name', 'category', 'unit')
    @classmethod
    def strip_whitespace(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class ItemUpdateInput(BaseModel):
    """Partial edit of an item definition; quantity is deliberately absent."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    unit: Optional[str] = Field(None, min_length=1, max_length=20)
    min_stock: Optional[float] = Field(None, ge=0)
    standard_measure: Optional[str] = None
    measure_weight: Optional[float] = Field(None, gt=0)
    code: Optional[str] = None


class PlanRequest(BaseModel):
    """Schema for a meal-planning calculation."""
    segment: Segment
    student_count: int = Field(..., ge=1, le=100000)
    item_ids: List[str] = Field(default_factory=list)
    menu: Optional[str] = None

    @field_validator('segment', mode='before')
    @classmethod
    def parse_segment(cls, v):
        return Segment.parse(v)


class CategoryInput(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)

    @field_validator('name')
    @classmethod
    def strip_whitespace(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Category name cannot be empty')
        return v


class ImportPayload(BaseModel):
    """Backup document accepted by import: inventory and receiving are mandatory lists."""
    inventory: List[dict]
    receiving: List[dict]
    consumption: Optional[List[dict]] = None
    categories: Optional[List[str]] = None
    meta: Optional[dict] = None


class InsightQuestion(BaseModel):
    question: str = Field(..., min_length=1, max_length=2000)
