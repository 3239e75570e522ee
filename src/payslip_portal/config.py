"""Environment-variable-driven configuration for the payroll portal."""

from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()


def _env_csv(name: str, default: str = "") -> list[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


# -- Upload -------------------------------------------------------------------
COMPANY_NAME: str = os.getenv("PORTAL_COMPANY_NAME", "Twinhill HQ")
# Documents are stored inline, so each file must stay under the record size cap.
MAX_INLINE_BYTES: int = int(os.getenv("PORTAL_MAX_INLINE_BYTES", str(950 * 1024)))
QUEUE_SETTLE_SEC: float = float(os.getenv("PORTAL_QUEUE_SETTLE_SEC", "0.5"))
MAX_PAGES: int = int(os.getenv("PORTAL_MAX_PAGES", "2"))

# -- Users --------------------------------------------------------------------
BOOTSTRAP_ADMIN_EMAILS: set[str] = {e.lower() for e in _env_csv("PORTAL_BOOTSTRAP_ADMINS")}

# -- Runtime ------------------------------------------------------------------
LOG_LEVEL: str = os.getenv("PORTAL_LOG_LEVEL", "INFO")
HOST: str = os.getenv("HOST", "127.0.0.1")
PORT: int = int(os.getenv("PORT", "8000"))
