"""
Database Schemas for the Kateri Pharmacy backend

Each Pydantic model below describes a document stored in MongoDB (or the body
of a request that produces one). Attributes are snake_case in Python and
camelCase on the wire and in the database, e.g. ``rx_number`` <-> ``rxNumber``.

Collections:
- "orders"           legacy contact/order form submissions
- "requests"         refill and consultation requests from the public site
- "claims"           NIHB claims tracked in the admin dashboard
- "archived_claims"  soft-deleted claims
- "settings"         single document of dashboard flags
"""

from typing import Annotated, List, Literal, Optional, Union, get_args

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# ---- Orders (legacy contact form) ----

class OrderCreate(CamelModel):
    """
    Order/contact form submissions
    Collection name: "orders"
    """
    full_name: Optional[str] = Field(None, max_length=100, description="Full name of the customer")
    email: Optional[EmailStr] = Field(None, description="Contact email")
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = Field(None, max_length=500)
    message: Optional[str] = Field(None, max_length=1000)
    prescription: Optional[str] = Field(None, description="Prescription number(s) or free text")
    captcha_token: Optional[str] = Field(None, exclude=True)

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_missing(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v else v


# ---- Requests (refills and consultations) ----

RequestStatus = Literal["pending", "in-progress", "completed"]
REQUEST_STATUSES = get_args(RequestStatus)

RequestType = Literal["refill", "consultation"]
REQUEST_TYPES = get_args(RequestType)


class RefillRequestCreate(CamelModel):
    type: Literal["refill"]
    phone: str = Field(..., min_length=1)
    name: Optional[str] = None
    prescriptions: List[str] = Field(default_factory=list)
    delivery_type: str = Field("pickup", description="pickup or delivery")
    estimated_time: str = Field("", description="'YYYY-MM-DD HH:MM' chosen by the patient")
    comments: str = ""
    preferred_date: Optional[str] = None
    preferred_time: Optional[str] = None
    captcha_token: Optional[str] = Field(None, exclude=True)


class ConsultationRequestCreate(CamelModel):
    type: Literal["consultation"]
    phone: str = Field(..., min_length=1)
    service: str = Field(..., description="Service code, e.g. uti, strep, travel")
    preferred_date_time: str = ""
    additional_note: str = ""
    captcha_token: Optional[str] = Field(None, exclude=True)


RequestCreate = Annotated[
    Union[RefillRequestCreate, ConsultationRequestCreate],
    Field(discriminator="type"),
]


class RequestStatusUpdate(BaseModel):
    status: Optional[str] = None


class FaxRequest(CamelModel):
    recipient_fax: Optional[str] = None
    recipient_name: Optional[str] = None


# ---- NIHB claims ----

ClaimCategory = Literal["medications", "appeals", "manual-claims", "diapers-pads"]
CLAIM_CATEGORIES = get_args(ClaimCategory)

ClaimType = Literal["new", "renewal", "prior-authorization"]

ClaimStatus = Literal[
    "new",
    "case-number-open",
    "authorized",
    "denied",
    "letter-sent-to-doctor",
    "letters-received",
    "letters-sent-to-nihb",
    "form-filled",
    "form-sent-to-doctor",
    "sent-to-nihb",
    "sent",
    "payment-received",
]
CLAIM_STATUSES = get_args(ClaimStatus)


class ClaimDocumentRef(CamelModel):
    filename: str
    file_path: str
    upload_date: str = ""
    type: str = ""


class ClaimNote(CamelModel):
    id: str
    text: str
    staff_username: str
    timestamp: str


class ClaimCreate(CamelModel):
    """
    NIHB claim tracked through its authorization lifecycle
    Collection name: "claims"
    """
    category: ClaimCategory
    rx_number: str = Field(..., min_length=1)
    product_name: str = Field(..., min_length=1)
    prescriber_name: str = ""
    prescriber_license: str = ""
    prescriber_fax: str = ""
    din_item: str = ""
    din: str = ""
    item_number: str = ""
    date_of_prescription: str = ""
    type: ClaimType = "new"
    claim_status: ClaimStatus = "new"
    patient_signed_letter: bool = False
    case_number: str = ""
    authorization_number: str = ""
    authorization_start_date: str = ""
    authorization_end_date: str = Field("", description="YYYY-MM-DD; drives expiry filters")
    manual_claim_type: Optional[Literal["baby", "old"]] = None
    parent_name_on_file: bool = False
    parent_band_number_updated: bool = False
    date_of_refill: str = ""
    documents: List[ClaimDocumentRef] = Field(default_factory=list)
    notes: List[ClaimNote] = Field(default_factory=list)
    priority: bool = False
    changed_by: Optional[str] = Field(None, exclude=True)


class ClaimDeletion(CamelModel):
    deletion_note: str = ""
    deleted_by: Optional[str] = None


class NoteCreate(CamelModel):
    claim_id: Optional[str] = None
    text: Optional[str] = None
    staff_username: Optional[str] = None


class DocumentAttach(CamelModel):
    claim_id: str
    filename: str
    file_path: str
    type: str = ""


# ---- Dashboard settings ----

SETTINGS_ID = "order_settings"


class Settings(CamelModel):
    id: str = SETTINGS_ID
    enable_printing: bool = True
    enable_notifications: bool = False
    send_to_fax_by_default: bool = True


class SettingsUpdate(CamelModel):
    enable_printing: Optional[bool] = None
    enable_notifications: Optional[bool] = None
    send_to_fax_by_default: Optional[bool] = None


# ---- Admin auth / misc ----

class LoginRequest(BaseModel):
    username: str
    password: str


class EmailTestRequest(BaseModel):
    to: Optional[EmailStr] = None
