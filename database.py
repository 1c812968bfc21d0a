# =============================================================================
# 🗄️ database.py
# -----------------------------------------------------------------------------
# SQLAlchemy-Datenbankkonfiguration für Qure QR
# Lokaler Key-Value-Speicher (SQLite) + .env
# =============================================================================

import os
from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

# 🔹 .env laden (z. B. aus .env-Datei im Projektverzeichnis)
load_dotenv()

# 🔹 Verbindungs-URL (Standard: lokale SQLite-Datei)
SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./qure.db")

_connect_args = {}
_engine_kwargs = {}
if SQLALCHEMY_DATABASE_URL.startswith("sqlite"):
    # Zugriffe laufen über asyncio.to_thread → mehrere Threads
    _connect_args["check_same_thread"] = False
    if SQLALCHEMY_DATABASE_URL in {"sqlite://", "sqlite:///:memory:"}:
        # In-Memory-DB: alle Threads teilen sich eine Verbindung
        _engine_kwargs["poolclass"] = StaticPool

# 🔹 Engine erstellen
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args=_connect_args,
    pool_pre_ping=True,
    echo=os.getenv("SQL_ECHO", "0") in {"1", "true", "yes"},
    **_engine_kwargs,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()
