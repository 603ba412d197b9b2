"""
Wire-shape models for a project record.

Attributes are snake_case; the JSON on the wire and in storage is camelCase
(materialCost, customWorkTypeName, ...), matching what the estimator UI sends.
"""

import datetime as dt
import enum
import re
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .measurements import MeasurementType
from .taxonomy import CUSTOM_WORK_TYPE

DEFAULT_WORK_ITEM_NAME = "Unnamed Work Item"

NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
TrimmedStr = Annotated[str, StringConstraints(strip_whitespace=True)]

ZIP_RE = re.compile(r"^\d{5}$")
EMAIL_RE = re.compile(r"^[\w\-.]+@([\w-]+\.)+[\w-]{2,4}$")


class PaymentMethod(str, enum.Enum):
    CREDIT = "Credit"
    DEBIT = "Debit"
    CHECK = "Check"
    CASH = "Cash"
    ZELLE = "Zelle"
    DEPOSIT = "Deposit"


class PaymentStatus(str, enum.Enum):
    PENDING = "Pending"
    PAID = "Paid"
    OVERDUE = "Overdue"


class ProjectType(str, enum.Enum):
    RESIDENTIAL = "Residential"
    COMMERCIAL = "Commercial"


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Category tree ---

class Surface(WireModel):
    name: TrimmedStr = ""
    measurement_type: Optional[str] = None  # falls back to the work item's
    width: float = Field(0.0, ge=0)
    height: float = Field(0.0, ge=0)
    sqft: float = Field(0.0, ge=0)
    manual_sqft: bool = False
    linear_ft: float = Field(0.0, ge=0)
    units: float = Field(0.0, ge=0)
    length: float = Field(0.0, ge=0)


class WorkItemBase(WireModel):
    name: TrimmedStr = DEFAULT_WORK_ITEM_NAME
    subtype: TrimmedStr = ""
    description: TrimmedStr = ""
    notes: TrimmedStr = ""
    material_cost: float = Field(0.0, ge=0)
    labor_cost: float = Field(0.0, ge=0)
    measurement_type: str = MeasurementType.AREA.value
    surfaces: List[Surface] = []
    category_key: Optional[str] = None  # copied from the owning category, never trusted


class StandardWorkItem(WorkItemBase):
    """A work item whose type is checked against the taxonomy."""
    kind: Literal["standard"] = "standard"
    type: NonBlankStr
    custom_work_type_name: TrimmedStr = ""

    @field_validator("type")
    @classmethod
    def _not_custom_marker(cls, v: str) -> str:
        if v == CUSTOM_WORK_TYPE:
            raise ValueError("Custom work types must use kind 'custom'.")
        return v


class CustomWorkItem(WorkItemBase):
    """A user-named work type, valid in any category."""
    kind: Literal["custom"] = "custom"
    type: Literal["custom-work-type"] = CUSTOM_WORK_TYPE
    custom_work_type_name: NonBlankStr


WorkItem = Annotated[Union[StandardWorkItem, CustomWorkItem], Field(discriminator="kind")]


class Category(WireModel):
    key: NonBlankStr
    name: NonBlankStr
    work_items: List[WorkItem] = []


# --- Settings ---

class MiscFee(WireModel):
    name: NonBlankStr
    amount: float = Field(ge=0)


class Payment(WireModel):
    date: dt.datetime
    amount: float = Field(ge=0.01)
    method: PaymentMethod = PaymentMethod.CASH
    note: TrimmedStr = ""
    is_paid: bool = True
    status: PaymentStatus = PaymentStatus.PAID


class ProjectSettings(WireModel):
    tax_rate: float = Field(0.0, ge=0, le=1)
    transportation_fee: float = Field(0.0, ge=0)
    waste_factor: float = Field(0.0, ge=0, le=1)
    labor_discount: float = Field(0.0, ge=0, le=1)
    markup: float = Field(0.0, ge=0, le=10)
    misc_fees: List[MiscFee] = []
    payments: List[Payment] = []


# --- Customer ---

class CustomerInfo(WireModel):
    first_name: NonBlankStr
    last_name: NonBlankStr
    street: TrimmedStr = ""
    unit: TrimmedStr = ""
    city: NonBlankStr
    state: NonBlankStr = "IL"
    zip_code: str
    phone: str
    email: str
    project_name: NonBlankStr
    type: ProjectType = ProjectType.RESIDENTIAL
    payment_type: PaymentMethod = PaymentMethod.CASH
    start_date: dt.datetime
    finish_date: Optional[dt.datetime] = None
    notes: TrimmedStr = ""
    address_number: Optional[str] = None
    direction: Optional[str] = None
    street_name: Optional[str] = None
    street_type: Optional[str] = None

    @field_validator("zip_code")
    @classmethod
    def _zip_code(cls, v: str) -> str:
        if not ZIP_RE.match(v or ""):
            raise ValueError("ZIP code must be 5 digits.")
        return v

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str) -> str:
        digits = re.sub(r"\D", "", v or "")
        if not 10 <= len(digits) <= 11:
            raise ValueError("Phone number must be a valid 10 or 11-digit number.")
        return v

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        v = (v or "").strip().lower()
        if not EMAIL_RE.match(v):
            raise ValueError("Please enter a valid email address.")
        return v

    @model_validator(mode="after")
    def _address_and_dates(self):
        if not self.street and not (self.address_number or self.street_name):
            raise ValueError("Street address is required.")
        if self.finish_date is not None:
            finish = self.finish_date.replace(tzinfo=None)
            start = self.start_date.replace(tzinfo=None)
            if finish < start:
                raise ValueError("Finish date cannot be before the start date.")
        return self


# --- Derived blocks ---

class Totals(WireModel):
    material_cost: float = 0.0
    labor_cost: float = 0.0
    labor_cost_before_discount: float = 0.0
    labor_discount: float = 0.0
    waste_cost: float = 0.0
    tax_amount: float = 0.0
    markup_amount: float = 0.0
    misc_fees_total: float = 0.0
    transportation_fee: float = 0.0
    subtotal: float = 0.0
    total: float = 0.0


class PaymentDetails(WireModel):
    total_paid: float = 0.0
    total_due: float = 0.0
    grand_total: float = 0.0
    deposit_amount: float = 0.0


class ProjectRecord(WireModel):
    """Everything persisted for one project, ready for the write."""
    user_id: int
    customer_info: CustomerInfo
    categories: List[Category]
    settings: ProjectSettings
    totals: Totals
    payment_details: PaymentDetails

    def to_storage(self) -> dict:
        """JSON-ready documents keyed by column."""
        data = self.model_dump(mode="json", by_alias=True)
        return {
            "customer_info": data["customerInfo"],
            "categories": data["categories"],
            "settings": data["settings"],
            "totals": data["totals"],
            "payment_details": data["paymentDetails"],
        }
