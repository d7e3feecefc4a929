import enum
import re
from datetime import date, time
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

PHONE_PATTERN = r"^\(?([0-9]{3})\)?[-. ]?([0-9]{3})[-. ]?([0-9]{4})$"

# Largest quote accepted for a single job
MAX_QUOTE = 100000.0

# Service checkboxes on the job form
DESCRIPTION_OPTIONS = ["Outside", "Inside", "Screens"]


class Scheduler(str, enum.Enum):
    WILL_GRIFFIOEN = "Will Griffioen"
    SEAN_BAIRD = "Sean Baird"


class JobRequest(BaseModel):
    name: str = Field(min_length=1)
    address: str = Field(min_length=1)
    job_date: date = Field(alias="jobDate")
    job_time: time = Field(alias="jobTime")
    quote: float = Field(ge=0.01, le=MAX_QUOTE, allow_inf_nan=False)
    phone: str = Field(pattern=PHONE_PATTERN)
    description: Optional[str] = None
    scheduled_by: Scheduler = Field(alias="scheduledBy")

    class Config:
        populate_by_name = True

    @field_validator("name", "address", mode="before")
    @classmethod
    def strip_required_text(cls, v):
        if isinstance(v, str):
            v = v.strip()
        return v

    @field_validator("phone", mode="before")
    @classmethod
    def strip_phone(cls, v):
        if isinstance(v, str):
            v = v.strip()
        return v

    @property
    def phone_digits(self) -> str:
        return re.sub(r"\D", "", self.phone)


class QuoteOut(BaseModel):
    pane_count: int
    suggested_quote: float
    inside_outside: float
    outside_only: float
    message: str


class PriceRow(BaseModel):
    panes: int
    inside_outside: float
    outside_only: float


class TimeSlot(BaseModel):
    label: str
    value: str


class DescriptionIn(BaseModel):
    options: List[str] = []
    notes: Optional[str] = None
