"""
Core Pydantic schemas for the WhatsApp transfer agent.
Provides type safety for WhatsApp Cloud API payloads, Wise transfers and typed bank details.
"""

from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


# WhatsApp Cloud API Schemas
class WhatsAppText(BaseModel):
    body: str = ""


class WhatsAppInboundMessage(BaseModel):
    """A single message inside a Cloud API webhook change."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    from_: str = Field(..., alias="from", description="Sender's phone number")
    id: str = Field(default="", description="WhatsApp message ID")
    timestamp: Optional[str] = None
    type: str = Field(default="text", description="Message type (text, image, audio...)")
    text: Optional[WhatsAppText] = None

    @property
    def body(self) -> Optional[str]:
        return self.text.body if self.text else None


class WhatsAppChangeValue(BaseModel):
    model_config = ConfigDict(extra="allow")

    messaging_product: Optional[str] = None
    messages: List[WhatsAppInboundMessage] = Field(default_factory=list)


class WhatsAppChange(BaseModel):
    model_config = ConfigDict(extra="allow")

    field: Optional[str] = None
    value: WhatsAppChangeValue = Field(default_factory=WhatsAppChangeValue)


class WhatsAppEntry(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    changes: List[WhatsAppChange] = Field(default_factory=list)


class WhatsAppWebhook(BaseModel):
    """WhatsApp Cloud API webhook payload schema."""
    model_config = ConfigDict(extra="allow")

    object: Optional[str] = Field(None, description="Object type")
    entry: List[WhatsAppEntry] = Field(default_factory=list, description="Webhook entry data")

    def iter_messages(self):
        for entry in self.entry:
            for change in entry.changes:
                yield from change.value.messages


# Typed bank details, one variant per settlement currency
class _BankDetailsBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, str_strip_whitespace=True)


NonEmpty = Annotated[str, Field(min_length=1)]


class MexicoBankDetails(_BankDetailsBase):
    currency: Literal["MXN"] = "MXN"
    clabe: NonEmpty


class BrazilBankDetails(_BankDetailsBase):
    currency: Literal["BRL"] = "BRL"
    cpf: NonEmpty
    account_number: NonEmpty = Field(..., alias="accountNumber")
    account_type: NonEmpty = Field(..., alias="accountType")
    bank_code: NonEmpty = Field(..., alias="bankCode")


class UKBankDetails(_BankDetailsBase):
    currency: Literal["GBP"] = "GBP"
    sort_code: NonEmpty = Field(..., alias="sortCode")
    account_number: NonEmpty = Field(..., alias="accountNumber")


class EuropeBankDetails(_BankDetailsBase):
    currency: Literal["EUR"] = "EUR"
    iban: NonEmpty


class ArgentinaBankDetails(_BankDetailsBase):
    currency: Literal["ARS"] = "ARS"
    account_number: NonEmpty = Field(..., alias="accountNumber")
    account_type: NonEmpty = Field(..., alias="accountType")
    phone_number: NonEmpty = Field(..., alias="phoneNumber")
    id_document_number: NonEmpty = Field(..., alias="idDocumentNumber")
    city: NonEmpty


class ChileBankDetails(_BankDetailsBase):
    currency: Literal["CLP"] = "CLP"
    account_number: NonEmpty = Field(..., alias="accountNumber")
    account_type: NonEmpty = Field(..., alias="accountType")
    bank_code: NonEmpty = Field(..., alias="bankCode")
    id_document_number: NonEmpty = Field(..., alias="idDocumentNumber")


class ColombiaBankDetails(_BankDetailsBase):
    currency: Literal["COP"] = "COP"
    account_number: NonEmpty = Field(..., alias="accountNumber")
    account_type: NonEmpty = Field(..., alias="accountType")
    phone_number: NonEmpty = Field(..., alias="phoneNumber")
    id_document_number: NonEmpty = Field(..., alias="idDocumentNumber")
    city: NonEmpty
    address: NonEmpty
    post_code: NonEmpty = Field(..., alias="postCode")


BankDetails = Annotated[
    Union[
        MexicoBankDetails,
        BrazilBankDetails,
        UKBankDetails,
        EuropeBankDetails,
        ArgentinaBankDetails,
        ChileBankDetails,
        ColombiaBankDetails,
    ],
    Field(discriminator="currency"),
]

_bank_details_adapter: TypeAdapter = TypeAdapter(BankDetails)


def build_bank_details(currency: str, details: Dict[str, str]):
    """
    Turn the collected field-name -> value map into the typed variant for a currency.

    Raises pydantic.ValidationError when a required field is missing or empty.
    """
    return _bank_details_adapter.validate_python({**details, "currency": currency})


# Transfer Schemas
class TransferResult(BaseModel):
    """Outcome of a transfer submission (real or demo)."""
    transfer_id: str = Field(..., description="Provider transfer ID")
    status: str = Field(..., description="Provider status, 'pending_funding' or 'demo'")
    amount: float = Field(..., description="Source amount in USD")
    target_amount: float = Field(..., description="Amount the recipient receives")
    target_currency: str
    rate: float
    fee: float
    estimated_delivery: Optional[str] = None
    recipient_name: Optional[str] = None
    recipient_country: Optional[str] = None
    is_demo: bool = False


# Verification Schemas
class VerificationSendRequest(BaseModel):
    phone_number: str = Field(..., description="Phone number to verify")
    language: Literal["en", "es"] = "en"

    @field_validator("phone_number")
    @classmethod
    def normalize_phone(cls, v: str) -> str:
        v = v.strip().replace(" ", "").lstrip("+")
        if not v.isdigit():
            raise ValueError("Phone number must contain digits only")
        return v


class VerificationCheckRequest(BaseModel):
    phone_number: str
    code: str = Field(..., min_length=6, max_length=6)

    @field_validator("phone_number")
    @classmethod
    def normalize_phone(cls, v: str) -> str:
        return v.strip().replace(" ", "").lstrip("+")


class VerificationCode(BaseModel):
    code: str
    phone_number: str
    created_at: datetime
    expires_at: datetime
    attempts: int = 0
    verified: bool = False


class VerificationAllowance(BaseModel):
    allowed: bool
    reason: Optional[str] = None
    retry_after: Optional[int] = None


class VerificationResult(BaseModel):
    valid: bool
    reason: Optional[str] = None
    attempts_left: Optional[int] = None


class StandardResponse(BaseModel):
    status: bool
    message: str
    data: Optional[Any] = None
