"""External email and phone verification adapters (Hunter, NumVerify)."""
from __future__ import annotations

from typing import Any, Dict, Optional

from ..errors import ProviderError
from ..merge import digits_only
from ..models import ValidationOutcome
from .base import HttpProvider


class HunterEmailValidator(HttpProvider):
    name = "hunter"
    BASE_URL = "https://api.hunter.io/v2"

    async def validate_email(self, address: str) -> ValidationOutcome:
        payload = await self._request(
            "GET",
            "/email-verifier",
            params={"email": address, "api_key": self._require_api_key()},
        )
        data = payload.get("data") or {}
        if "result" not in data:
            raise ProviderError(self.name, "Response is missing a verification result")
        return ValidationOutcome(
            value=address,
            valid=data["result"] == "deliverable",
            confidence=float(data.get("score") or 0) / 100,
            reason=str(data["result"]),
            details={
                "status": data.get("status"),
                "disposable": data.get("disposable"),
                "webmail": data.get("webmail"),
            },
        )


class NumVerifyPhoneValidator(HttpProvider):
    name = "numverify"
    BASE_URL = "http://apilayer.net/api"

    async def validate_phone(self, number: str, region_hint: Optional[str] = None) -> ValidationOutcome:
        params: Dict[str, Any] = {
            "access_key": self._require_api_key(),
            "number": digits_only(number),
            "format": 1,
        }
        if region_hint:
            params["country_code"] = region_hint
        payload = await self._request("GET", "/validate", params=params)
        if payload.get("error"):
            raise ProviderError(self.name, str(payload["error"]))

        valid = bool(payload.get("valid"))
        return ValidationOutcome(
            value=number,
            valid=valid,
            confidence=0.95 if valid else 0.0,
            reason="verified" if valid else "invalid",
            details={
                "carrier": payload.get("carrier"),
                "line_type": payload.get("line_type"),
                "location": payload.get("location"),
                "country_code": payload.get("country_code"),
                "country_name": payload.get("country_name"),
                "international_format": payload.get("international_format"),
                "local_format": payload.get("local_format"),
            },
        )


__all__ = ["HunterEmailValidator", "NumVerifyPhoneValidator"]
