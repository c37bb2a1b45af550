import hashlib
import hmac
import os
from dataclasses import dataclass
from typing import Any

import httpx

from bepawa_care.ai.types import OrchestratorResponse


# WhatsApp Cloud API limits for interactive reply buttons.
MAX_BUTTONS = 3
MAX_BUTTON_TITLE = 20
MAX_BUTTON_ID = 256
MAX_INTERACTIVE_BODY = 1024


@dataclass(frozen=True)
class WhatsAppError(RuntimeError):
    status_code: int | None
    message: str

    def __str__(self) -> str:  # pragma: no cover
        prefix = f"Graph API error ({self.status_code})" if self.status_code is not None else "Graph API error"
        return f"{prefix}: {self.message}"


def verify_token() -> str:
    return os.getenv("WHATSAPP_VERIFY_TOKEN", "").strip()


def verify_signature(body: bytes, signature_header: str | None) -> bool:
    """Check Meta's ``X-Hub-Signature-256``; always true when no app secret is configured."""
    secret = os.getenv("WHATSAPP_APP_SECRET", "").strip()
    if not secret:
        return True
    if not signature_header or not signature_header.startswith("sha256="):
        return False
    expected = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, signature_header.split("=", 1)[1].strip())


def extract_messages(payload: dict[str, Any]) -> list[dict[str, str]]:
    """Flatten a webhook payload into ``{"from", "id", "text"}`` items (text and button replies)."""
    out: list[dict[str, str]] = []
    for entry in payload.get("entry") or []:
        for change in (entry or {}).get("changes") or []:
            value = (change or {}).get("value") or {}
            for msg in value.get("messages") or []:
                sender = str(msg.get("from") or "").strip()
                kind = msg.get("type")
                text = ""
                if kind == "text":
                    text = str((msg.get("text") or {}).get("body") or "")
                elif kind == "interactive":
                    interactive = msg.get("interactive") or {}
                    button = interactive.get("button_reply")
                    if button:
                        # Our button ids carry the full suggestion; titles are cut to 20 chars.
                        title = str(button.get("title") or "")
                        button_id = str(button.get("id") or "")
                        text = button_id if title and button_id.startswith(title) else title
                    else:
                        text = str((interactive.get("list_reply") or {}).get("title") or "")
                elif kind == "button":
                    text = str((msg.get("button") or {}).get("text") or "")
                if sender and text.strip():
                    out.append({"from": sender, "id": str(msg.get("id") or ""), "text": text.strip()})
    return out


def build_payload(to: str, response: OrchestratorResponse) -> dict[str, Any]:
    suggestions = [s for s in response.suggestions if s][:MAX_BUTTONS]
    if not suggestions or len(response.content) > MAX_INTERACTIVE_BODY:
        return {
            "messaging_product": "whatsapp",
            "to": to,
            "type": "text",
            "text": {"preview_url": False, "body": response.content},
        }
    return {
        "messaging_product": "whatsapp",
        "to": to,
        "type": "interactive",
        "interactive": {
            "type": "button",
            "body": {"text": response.content},
            "action": {
                "buttons": [
                    {"type": "reply", "reply": {"id": label[:MAX_BUTTON_ID], "title": label[:MAX_BUTTON_TITLE]}}
                    for label in suggestions
                ]
            },
        },
    }


async def _post_message(url: str, token: str, payload: dict[str, Any]) -> None:
    async with httpx.AsyncClient(timeout=float(os.getenv("WHATSAPP_TIMEOUT_S", "5"))) as client:
        res = await client.post(url, headers={"Authorization": f"Bearer {token}"}, json=payload)
    if res.status_code >= 400:
        raise WhatsAppError(res.status_code, res.text[:200])


async def send_response(to: str, response: OrchestratorResponse) -> tuple[bool, str | None]:
    token = os.getenv("WHATSAPP_ACCESS_TOKEN", "").strip()
    phone_number_id = os.getenv("WHATSAPP_PHONE_NUMBER_ID", "").strip()
    if not token or not phone_number_id:
        return False, "WhatsApp not configured"
    version = os.getenv("WHATSAPP_GRAPH_VERSION", "v19.0").strip()
    url = f"https://graph.facebook.com/{version}/{phone_number_id}/messages"
    try:
        await _post_message(url, token, build_payload(to, response))
    except (httpx.HTTPError, WhatsAppError) as exc:
        return False, str(exc)
    return True, None
