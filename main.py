# =============================================================================
# 🚀 Qure QR – Hauptapplikation (main.py)
# =============================================================================

from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Dict, List

from dotenv import load_dotenv
from fastapi import FastAPI

# -------------------------------------------------------------------------
# 1️⃣ .env laden (muss ganz oben sein!)
# -------------------------------------------------------------------------
env_path = Path(__file__).resolve().parent / ".env"
load_dotenv(dotenv_path=env_path)

logging.basicConfig(
    level=os.getenv("QURE_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

from database import Base, engine  # noqa: E402
import models  # noqa: E402,F401  (registriert die Tabellen)

# -------------------------------------------------------------------------
# 2️⃣ FastAPI App
# -------------------------------------------------------------------------
app = FastAPI(title="Qure QR", version="1.0")
Base.metadata.create_all(bind=engine)

# -------------------------------------------------------------------------
# 3️⃣ Routen laden
# -------------------------------------------------------------------------
from routes import design, qr_codes  # noqa: E402

app.include_router(qr_codes.router)
app.include_router(design.router)


# -------------------------------------------------------------------------
# 4️⃣ Health & Debug
# -------------------------------------------------------------------------
@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/debug/routes")
def debug_routes() -> List[Dict[str, str]]:
    return [{"path": r.path, "name": r.name} for r in app.routes]
