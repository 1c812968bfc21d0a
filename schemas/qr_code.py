# =============================================================================
# 🧩 schemas/qr_code.py
# -----------------------------------------------------------------------------
# Datenmodell der gespeicherten QR-Codes (Tagged Union über "type").
# JSON-Felder bleiben camelCase (createdAt, primarySlot, ...), damit das
# gespeicherte Format stabil bleibt.
# =============================================================================

from __future__ import annotations

from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel


class QRCodeType(str, Enum):
    LINK = "link"
    EMAIL = "email"
    PHONE = "phone"
    SMS = "sms"
    VCARD = "vcard"
    WHATSAPP = "whatsapp"
    TEXT = "text"


ErrorCorrectionLevel = Literal["L", "M", "Q", "H"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QRDesignOptions(CamelModel):
    color: str = "#000000"
    background_color: str = "#FFFFFF"
    gradient: bool = False
    gradient_start_color: str = "#6A5AE0"
    gradient_end_color: str = "#9747FF"
    error_correction_level: ErrorCorrectionLevel = "M"
    quiet_zone: int = Field(default=4, ge=0)


class BaseQRCode(CamelModel):
    id: str
    label: str
    created_at: int
    updated_at: int
    design: QRDesignOptions = Field(default_factory=QRDesignOptions)


class LinkQRCode(BaseQRCode):
    type: Literal["link"] = "link"
    url: str


class EmailQRCode(BaseQRCode):
    type: Literal["email"] = "email"
    email: str
    subject: Optional[str] = None
    body: Optional[str] = None


class PhoneQRCode(BaseQRCode):
    type: Literal["phone"] = "phone"
    country_code: str
    phone_number: str


class SMSQRCode(BaseQRCode):
    type: Literal["sms"] = "sms"
    country_code: str
    phone_number: str
    message: Optional[str] = None


class VCardQRCode(BaseQRCode):
    type: Literal["vcard"] = "vcard"
    first_name: str
    last_name: str
    phone_number: Optional[str] = None
    mobile_number: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    company: Optional[str] = None
    job_title: Optional[str] = None
    fax: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    post_code: Optional[str] = None
    country: Optional[str] = None


class WhatsAppQRCode(BaseQRCode):
    type: Literal["whatsapp"] = "whatsapp"
    country_code: str
    phone_number: str
    message: Optional[str] = None


class TextQRCode(BaseQRCode):
    type: Literal["text"] = "text"
    content: str


QRCode = Annotated[
    Union[
        LinkQRCode,
        EmailQRCode,
        PhoneQRCode,
        SMSQRCode,
        VCardQRCode,
        WhatsAppQRCode,
        TextQRCode,
    ],
    Field(discriminator="type"),
]

# Validiert einen einzelnen Datensatz (dict oder JSON) anhand von "type"
qr_code_adapter: TypeAdapter = TypeAdapter(QRCode)

# Modellklasse je Typ (für Factories und Edit-Routen)
QR_MODELS = {
    QRCodeType.LINK: LinkQRCode,
    QRCodeType.EMAIL: EmailQRCode,
    QRCodeType.PHONE: PhoneQRCode,
    QRCodeType.SMS: SMSQRCode,
    QRCodeType.VCARD: VCardQRCode,
    QRCodeType.WHATSAPP: WhatsAppQRCode,
    QRCodeType.TEXT: TextQRCode,
}


class QRCodeHistory(CamelModel):
    codes: List[QRCode] = Field(default_factory=list)
    primary_slot: Optional[str] = None
    secondary_slot: Optional[str] = None

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
