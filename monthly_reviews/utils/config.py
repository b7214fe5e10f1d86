"""Load and validate environment variables. Uses python-dotenv.

This module is intentionally thin and side-effect free except for loading `.env`.
Callers should use the accessor functions below rather than reading `os.environ`
directly, to keep environment handling consistent.
"""

from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
import os

STORAGE_BACKENDS = ("local", "supabase")


def _project_root() -> Path:
    """Resolve project root (the directory holding app.py)."""
    return Path(__file__).resolve().parent.parent.parent


def load_config() -> None:
    """
    Load .env from project root. Idempotent; safe to call multiple times.
    Uses override=True to ensure .env values take precedence over existing env vars.
    """
    load_dotenv(_project_root() / ".env", override=True)


def get_required(key: str) -> str:
    """
    Get required env var. Raises if missing or empty.

    Raises:
        ValueError: If key is missing or empty after trimming.
    """
    load_config()
    val = os.getenv(key, "").strip()
    if not val:
        raise ValueError(
            f"Missing required environment variable: {key}. "
            "Set it in .env or export it."
        )
    return val


def get_optional(key: str, default: str = "") -> str:
    """Get optional env var; return default if missing or empty."""
    load_config()
    val = os.getenv(key, "").strip()
    return val if val else default


def get_optional_int(key: str, default: int) -> int:
    """Get optional env var as int; return default if missing or invalid."""
    load_config()
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


# --- Public config accessors ---

def storage_backend() -> str:
    """Optional: persistence backend, `local` (default) or `supabase`."""
    val = get_optional("STORAGE_BACKEND", "local").lower()
    if val not in STORAGE_BACKENDS:
        raise ValueError(
            f"Unsupported STORAGE_BACKEND: {val!r}. Use one of: {', '.join(STORAGE_BACKENDS)}."
        )
    return val


def local_data_dir() -> Path:
    """Optional: directory for the local JSON store. Default <project>/data."""
    val = get_optional("LOCAL_DATA_DIR", "")
    return Path(val) if val else _project_root() / "data"


def supabase_url() -> str:
    """Required (when STORAGE_BACKEND=supabase): project URL, without trailing slash."""
    return get_required("SUPABASE_URL").rstrip("/")


def supabase_anon_key() -> str:
    """Required (when STORAGE_BACKEND=supabase): public anon API key."""
    return get_required("SUPABASE_ANON_KEY")


def image_bucket() -> str:
    """Optional: storage bucket for uploaded images. Default images."""
    return get_optional("SUPABASE_IMAGE_BUCKET", "images")


def request_timeout() -> int:
    """Optional: HTTP timeout in seconds for backend calls. Default 30."""
    return get_optional_int("REQUEST_TIMEOUT_SECONDS", 30)


def admin_username() -> str:
    """Optional: initial admin username for the local credential store."""
    return get_optional("ADMIN_USERNAME", "admin")


def admin_password() -> str:
    """Optional: initial admin password for the local credential store."""
    return get_optional("ADMIN_PASSWORD", "password123")


def log_level() -> str:
    return get_optional("LOG_LEVEL", "INFO").upper()


def log_file() -> Optional[Path]:
    val = get_optional("LOG_FILE", "")
    return Path(val) if val else None


def project_root() -> Path:
    """Project root directory."""
    return _project_root()
