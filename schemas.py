"""
Database Schemas

MongoDB collection schemas and request/response payloads, defined with
Pydantic models.

Storage models map to collections:
- User -> "users" collection
- Cost -> "costs" collection

Request models keep every field optional; required-field and category checks
happen in the service layer so that all problems are reported together.
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional, Union, get_args
from datetime import date, datetime

Category = Literal["food", "health", "housing", "sport", "education"]
CATEGORIES = get_args(Category)


# Storage schemas

class Cost(BaseModel):
    """
    Cost entries
    Collection name: "costs"
    """
    description: str = Field(..., min_length=1, description="What the money was spent on")
    category: Category = Field(..., description="One of: food, health, housing, sport, education")
    sum: float = Field(..., gt=0, allow_inf_nan=False, description="Amount spent")
    userid: str = Field(..., description="Reference to the user's external id")
    created_at: datetime = Field(default_factory=datetime.now, description="When the cost was incurred")


class User(BaseModel):
    """
    Registered users
    Collection name: "users"
    """
    id: str = Field(..., description="Externally supplied unique identifier")
    first_name: str
    last_name: str
    birthday: datetime
    marital_status: str
    total_costs: float = Field(0, description="Running total of all the user's costs")


# Request payloads

class CostCreate(BaseModel):
    description: Optional[str] = None
    category: Optional[str] = None
    sum: Any = None
    userid: Optional[Union[str, int]] = None
    created_at: Optional[datetime] = None


class UserCreate(BaseModel):
    id: Optional[Union[str, int]] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    birthday: Optional[date] = None
    marital_status: Optional[str] = None


# Responses

class UserDetails(BaseModel):
    id: str
    first_name: str
    last_name: str
    total: float


class TeamMember(BaseModel):
    first_name: str
    last_name: str


class ReportSummary(BaseModel):
    monthlyTotal: float
    totalCosts: float
    categoryTotals: Dict[str, float]


class ReportEntry(BaseModel):
    sum: float
    description: str
    day: int


class MonthlyReport(BaseModel):
    userid: str
    year: int
    month: int
    summary: ReportSummary
    costs: List[Dict[str, List[ReportEntry]]]
