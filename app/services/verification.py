"""Document / identity verification oracle — OpenAI vision with JSON responses.

Three checks, each a single chat-completions call:
1. **Ownership** — does the owner's name appear on the deed (match and
   confidence ≥ ``OWNERSHIP_MATCH_THRESHOLD``)?
2. **Identity integrity** — does the government ID carry the registered name
   (similarity ≥ ``IDENTITY_MATCH_THRESHOLD``) and look untampered?
3. **Face match** — is the live capture the person on the ID (confidence ≥
   ``FACE_MATCH_THRESHOLD``)?

The oracle only answers; callers decide what a negative answer means.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List

from openai import AsyncOpenAI, OpenAIError

from app.core.config import settings
from app.core.exceptions import AppException, VerificationServiceError

logger = logging.getLogger(__name__)

# ── Prompts ───────────────────────────────────────────────────────────────

OWNERSHIP_PROMPT = """You are a land-registry clerk reviewing a property deed or title document.
Decide whether the given name appears on the document as the owner or beneficiary.
Accept exact or high-similarity matches only.

Output ONLY valid JSON:
{"match_found": <bool>, "confidence": <number 0-100>}"""

IDENTITY_PROMPT = """You are a KYC analyst reviewing a government-issued ID.
1. Extract the full name from the ID.
2. Compare it with the registered name provided by the user.
3. Evaluate the authenticity of the document and whether it appears tampered.
4. Score the name similarity between 0 and 100.

Output ONLY valid JSON:
{"extracted_name": "<string>", "similarity": <number 0-100>, "is_tampered": <bool>, "reason": "<short explanation>"}"""

FACE_PROMPT = """You are a biometric analyst. Image 1 is a government ID, image 2 is a live face capture.
Decide whether they show the same person, looking at facial features, bone structure and distinctive marks.

Output ONLY valid JSON:
{"is_same_person": <bool>, "confidence": <number 0-100>, "reason": "<short explanation>"}"""


@dataclass(frozen=True)
class IdentityCheck:
    confidence: float
    verified: bool
    reason: str


def _image_part(b64: str) -> Dict[str, Any]:
    """Accept raw base64 or a ``data:`` URL."""
    data = b64.split(",", 1)[1] if b64.startswith("data:") else b64
    return {
        "type": "image_url",
        "image_url": {
            "url": f"data:image/jpeg;base64,{data}",
            "detail": settings.openai_vision_detail,
        },
    }


def _number(result: Dict[str, Any], key: str) -> float:
    try:
        return float(result.get(key) or 0)
    except (TypeError, ValueError):
        return 0.0


class VerificationService:
    """Thin async wrapper around OpenAI for the registry's verification checks."""

    def __init__(self, client: AsyncOpenAI | None = None) -> None:
        if client is None and not settings.ai_enabled:
            raise AppException("AI features are not available", status_code=503, code="AI_UNAVAILABLE")
        self.client = client or AsyncOpenAI(
            api_key=settings.openai_api_key,
            timeout=settings.openai_timeout,
        )
        self.model = settings.openai_model
        self.max_tokens = settings.openai_max_tokens

    # ── Core OpenAI call ──────────────────────────────────────────────────

    async def _call_openai(self, system_prompt: str, content: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Send an async request to OpenAI and return parsed JSON."""
        try:
            logger.info("Calling OpenAI model=%s, parts=%d", self.model, len(content))
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": content},
                ],
                max_completion_tokens=self.max_tokens,
                response_format={"type": "json_object"},
            )

            raw = response.choices[0].message.content
            if not raw:
                raise VerificationServiceError("Empty response from verification service")
            return json.loads(raw)

        except OpenAIError as exc:
            logger.warning("OpenAI API error: %s", exc)
            raise VerificationServiceError(f"Verification service error: {exc}") from exc
        except json.JSONDecodeError as exc:
            logger.warning("Invalid JSON from OpenAI: %s", exc)
            raise VerificationServiceError(f"Invalid JSON response: {exc}") from exc

    # ── Public methods ────────────────────────────────────────────────────

    async def verify_document_ownership(self, document_b64: str, owner_name: str) -> bool:
        result = await self._call_openai(
            OWNERSHIP_PROMPT,
            [_image_part(document_b64), {"type": "text", "text": f'Owner name: "{owner_name}"'}],
        )
        verified = bool(result.get("match_found")) and _number(result, "confidence") >= settings.ownership_match_threshold
        if not verified:
            logger.warning("Ownership document rejected for owner=%s", owner_name)
        return verified

    async def verify_identity_integrity(self, id_b64: str, registered_name: str) -> IdentityCheck:
        result = await self._call_openai(
            IDENTITY_PROMPT,
            [_image_part(id_b64), {"type": "text", "text": f'Registered name: "{registered_name}"'}],
        )
        similarity = _number(result, "similarity")
        return IdentityCheck(
            confidence=similarity,
            verified=similarity >= settings.identity_match_threshold and not result.get("is_tampered"),
            reason=result.get("reason") or "Verification completed",
        )

    async def compare_face_with_id(self, id_b64: str, face_b64: str) -> IdentityCheck:
        result = await self._call_openai(FACE_PROMPT, [_image_part(id_b64), _image_part(face_b64)])
        confidence = _number(result, "confidence")
        return IdentityCheck(
            confidence=confidence,
            verified=bool(result.get("is_same_person")) and confidence >= settings.face_match_threshold,
            reason=result.get("reason") or "Face comparison completed",
        )


def get_verifier() -> VerificationService:
    """Factory that creates a VerificationService instance.

    Raises a 503 ``AppException`` when the OpenAI key is not configured.
    """
    return VerificationService()
