from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class CalculateCommission(BaseModel):
    period_id: str = Field(..., min_length=1)


class ClosePeriod(BaseModel):
    period_id: str = Field(..., min_length=1)


class CommissionAdjustmentCreate(BaseModel):
    period_id: str = Field(..., min_length=1)
    salesperson: str = Field(..., min_length=1)
    kind: Literal["credit", "debit"] = "credit"
    amount: Decimal = Field(..., gt=0)
    description: str

    @field_validator("description", "salesperson")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class CalculationSummary(BaseModel):
    period_id: str
    salesperson_count: int
    sale_count: int
    total_mrr: float
    goal_met: bool
