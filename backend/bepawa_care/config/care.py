from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any


_KNOWLEDGE_BACKENDS = {"local", "remote", "none"}
_TRANSLATE_BACKENDS = {"remote", "google", "none"}


@dataclass(frozen=True)
class CareConfig:
    knowledge_backend: str = "local"  # local | remote | none
    knowledge_min_score: float = 0.35
    knowledge_timeout_s: float = 4.0
    translate_backend: str = "none"  # remote | google | none
    translate_timeout_s: float = 4.0
    functions_url: str = ""
    functions_key: str = ""
    emergency_number: str = "112"
    counselor_whatsapp_url: str = "https://wa.me/255713434625"
    session_ttl_minutes: int = 30


def _repo_backend_root() -> Path:
    # backend/bepawa_care/config/care.py -> backend/
    return Path(__file__).resolve().parents[2]


def _parse_scalar(val: str) -> Any:
    if val.lower() in {"true", "false"}:
        return val.lower() == "true"
    try:
        return int(val)
    except ValueError:
        pass
    try:
        return float(val)
    except ValueError:
        return val.strip("\"'")


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    raw = path.read_text(encoding="utf-8")
    if not raw.strip():
        return {}

    # Minimal YAML reader for `backend/config/care.yaml`:
    # a top-level `care:` mapping holding scalar `key: value` pairs.
    care: dict[str, Any] = {}
    in_care = False
    for line in raw.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if not in_care and stripped == "care:":
            in_care = True
            continue
        if in_care:
            if not line.startswith("  "):
                in_care = False
                continue
            kv = stripped.split(":", 1)
            if len(kv) != 2:
                continue
            key = kv[0].strip()
            val = kv[1].strip()
            if " #" in val:
                val = val.split(" #", 1)[0].strip()
            care[key] = _parse_scalar(val)
    return {"care": care} if care else {}


def _env_str(key: str) -> str | None:
    if key not in os.environ:
        return None
    return (os.getenv(key) or "").strip()


def _env_int(key: str) -> int | None:
    if key not in os.environ:
        return None
    try:
        return int(os.getenv(key) or "")
    except ValueError:
        return None


def _env_float(key: str) -> float | None:
    if key not in os.environ:
        return None
    try:
        return float(os.getenv(key) or "")
    except ValueError:
        return None


def _pick(env_value, file_value, default):
    if env_value is not None and env_value != "":
        return env_value
    if file_value is not None and file_value != "":
        return file_value
    return default


@lru_cache(maxsize=1)
def get_care_config() -> CareConfig:
    path = Path(os.getenv("CARE_CONFIG_FILE") or (_repo_backend_root() / "config" / "care.yaml"))
    data = _load_yaml(path)
    care = data.get("care") if isinstance(data.get("care"), dict) else {}
    defaults = CareConfig()

    knowledge_backend = str(_pick(_env_str("CARE_KNOWLEDGE_BACKEND"), care.get("knowledge_backend"), defaults.knowledge_backend)).lower()
    if knowledge_backend not in _KNOWLEDGE_BACKENDS:
        knowledge_backend = defaults.knowledge_backend
    translate_backend = str(_pick(_env_str("CARE_TRANSLATE_BACKEND"), care.get("translate_backend"), defaults.translate_backend)).lower()
    if translate_backend not in _TRANSLATE_BACKENDS:
        translate_backend = defaults.translate_backend

    # Supabase-style edge functions live under <project>/functions/v1.
    supabase_url = (os.getenv("SUPABASE_URL") or "").strip().rstrip("/")
    functions_default = f"{supabase_url}/functions/v1" if supabase_url else ""
    functions_url = str(_pick(_env_str("CARE_FUNCTIONS_URL"), care.get("functions_url"), functions_default)).rstrip("/")
    functions_key = str(
        _pick(_env_str("CARE_FUNCTIONS_KEY"), care.get("functions_key"), (os.getenv("SUPABASE_ANON_KEY") or "").strip())
    )

    return CareConfig(
        knowledge_backend=knowledge_backend,
        knowledge_min_score=float(_pick(_env_float("CARE_KNOWLEDGE_MIN_SCORE"), care.get("knowledge_min_score"), defaults.knowledge_min_score)),
        knowledge_timeout_s=float(_pick(_env_float("CARE_KNOWLEDGE_TIMEOUT_S"), care.get("knowledge_timeout_s"), defaults.knowledge_timeout_s)),
        translate_backend=translate_backend,
        translate_timeout_s=float(_pick(_env_float("CARE_TRANSLATE_TIMEOUT_S"), care.get("translate_timeout_s"), defaults.translate_timeout_s)),
        functions_url=functions_url,
        functions_key=functions_key,
        emergency_number=str(_pick(_env_str("CARE_EMERGENCY_NUMBER"), care.get("emergency_number"), defaults.emergency_number)),
        counselor_whatsapp_url=str(
            _pick(_env_str("CARE_COUNSELOR_WHATSAPP_URL"), care.get("counselor_whatsapp_url"), defaults.counselor_whatsapp_url)
        ),
        session_ttl_minutes=int(_pick(_env_int("CARE_SESSION_TTL_MINUTES"), care.get("session_ttl_minutes"), defaults.session_ttl_minutes)),
    )
