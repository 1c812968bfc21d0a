# models/kv_entry.py
from __future__ import annotations

from typing import Optional

from sqlalchemy import DateTime, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column
from database import Base


class KVEntry(Base):
    """
    Ein Eintrag im lokalen Key-Value-Speicher:
    - key: fester Speicherschlüssel (z. B. "qure_qr_codes")
    - value: JSON-kodierter Text
    """
    __tablename__ = "kv_store"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)

    updated_at: Mapped[Optional[DateTime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"<KVEntry(key='{self.key}', size={len(self.value or '')})>"
