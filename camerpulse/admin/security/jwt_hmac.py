import base64
import hashlib
import hmac
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


class AdminAuthError(Exception):
    pass


def _b64url_decode(value: str) -> bytes:
    padding = "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode((value + padding).encode("ascii"))


def _b64url_encode(value: bytes) -> str:
    return base64.urlsafe_b64encode(value).decode("ascii").rstrip("=")


@dataclass(frozen=True)
class AdminClaims:
    sub: str
    roles: List[str]


ROLE_RANK = {"viewer": 1, "reviewer": 2, "admin": 3}


class AdminTokenVerifier:
    """
    HS256 bearer tokens for the admin console.
    """

    def __init__(self, secret: str, issuer: str = "", leeway_seconds: int = 0):
        self.secret = secret.encode("utf-8")
        self.issuer = issuer
        self.leeway_seconds = leeway_seconds

    def verify(self, token: str, now: Optional[datetime] = None) -> AdminClaims:
        parts = token.split(".")
        if len(parts) != 3:
            raise AdminAuthError("Malformed token")
        header_b64, payload_b64, signature_b64 = parts

        try:
            header = json.loads(_b64url_decode(header_b64))
            provided_sig = _b64url_decode(signature_b64)
            payload = json.loads(_b64url_decode(payload_b64))
        except ValueError as exc:
            raise AdminAuthError("Malformed token") from exc
        if header.get("alg") != "HS256":
            raise AdminAuthError("Unsupported algorithm")

        expected_sig = self._sign(f"{header_b64}.{payload_b64}")
        if not hmac.compare_digest(expected_sig, provided_sig):
            raise AdminAuthError("Invalid signature")

        current = int((now or datetime.now(timezone.utc)).timestamp())
        exp = payload.get("exp")
        if exp is not None and current > int(exp) + self.leeway_seconds:
            raise AdminAuthError("Token expired")
        if self.issuer and payload.get("iss") != self.issuer:
            raise AdminAuthError("Invalid issuer")

        roles = payload.get("roles") or []
        if isinstance(roles, str):
            roles = [roles]
        return AdminClaims(sub=str(payload.get("sub", "unknown")), roles=[str(r) for r in roles])

    def issue(self, claims: Dict[str, Any]) -> str:
        """Mint a token; used by ops scripts and tests."""
        header_b64 = _b64url_encode(json.dumps({"alg": "HS256", "typ": "JWT"}, separators=(",", ":")).encode())
        payload_b64 = _b64url_encode(json.dumps(claims, separators=(",", ":")).encode())
        signature = _b64url_encode(self._sign(f"{header_b64}.{payload_b64}"))
        return f"{header_b64}.{payload_b64}.{signature}"

    def _sign(self, signing_input: str) -> bytes:
        return hmac.new(self.secret, signing_input.encode("ascii"), hashlib.sha256).digest()


def require_role(claims: AdminClaims, required_role: str) -> None:
    if required_role not in ROLE_RANK:
        raise AdminAuthError(f"Unknown role: {required_role}")
    best = max((ROLE_RANK.get(role, 0) for role in claims.roles), default=0)
    if best < ROLE_RANK[required_role]:
        raise AdminAuthError(f"Insufficient role: requires {required_role}")
