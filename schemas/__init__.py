from .qr_code import (
    QRCode,
    QRCodeHistory,
    QRCodeType,
    QRDesignOptions,
    LinkQRCode,
    EmailQRCode,
    PhoneQRCode,
    SMSQRCode,
    VCardQRCode,
    WhatsAppQRCode,
    TextQRCode,
    QR_MODELS,
    qr_code_adapter,
)

__all__ = [
    "QRCode",
    "QRCodeHistory",
    "QRCodeType",
    "QRDesignOptions",
    "LinkQRCode",
    "EmailQRCode",
    "PhoneQRCode",
    "SMSQRCode",
    "VCardQRCode",
    "WhatsAppQRCode",
    "TextQRCode",
    "QR_MODELS",
    "qr_code_adapter",
]
