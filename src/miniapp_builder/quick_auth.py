from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol, Sequence

import jwt

from .identifiers import is_valid_wallet, normalize_wallet

logger = logging.getLogger(__name__)

DEFAULT_ISSUER = "https://auth.farcaster.xyz"
DEFAULT_JWKS_URL = "https://auth.farcaster.xyz/.well-known/jwks.json"
DEFAULT_ALGORITHMS = ("RS256", "ES256", "EdDSA")


class UnauthorizedError(Exception):
    """Raised when a bearer credential cannot be resolved to an identity."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class AuthContext:
    wallet: str
    fid: int


class SigningKeyResolver(Protocol):
    def get_signing_key_from_jwt(self, token: str) -> Any:
        ...


class TokenVerifier(Protocol):
    def verify(self, token: str | None) -> AuthContext:
        ...


def bearer_token(authorization: str | None) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization or not authorization.startswith("Bearer "):
        raise UnauthorizedError("Missing bearer token")
    token = authorization[len("Bearer ") :].strip()
    if not token:
        raise UnauthorizedError("Missing bearer token")
    return token


class QuickAuthVerifier:
    """Verifies Farcaster Quick Auth JWTs and resolves them to a wallet and fid."""

    def __init__(
        self,
        *,
        domain: str | None,
        issuer: str = DEFAULT_ISSUER,
        jwks_url: str = DEFAULT_JWKS_URL,
        algorithms: Sequence[str] = DEFAULT_ALGORITHMS,
        jwks_client: SigningKeyResolver | None = None,
    ) -> None:
        self.domain = domain
        self.issuer = issuer
        self.algorithms = list(algorithms)
        self._jwks_client = jwks_client or jwt.PyJWKClient(jwks_url)

    def verify(self, token: str | None) -> AuthContext:
        if not token or not token.strip():
            raise UnauthorizedError("Missing bearer token")
        if not self.domain:
            logger.error("QUICK_AUTH_DOMAIN is not configured")
            raise UnauthorizedError()

        claims = self._decode(token.strip())

        fid = self._fid_from_claims(claims)
        if fid is None:
            raise UnauthorizedError()

        wallet = normalize_wallet(str(claims.get("wallet_address") or claims.get("address") or ""))
        if not is_valid_wallet(wallet):
            raise UnauthorizedError()

        return AuthContext(wallet=wallet, fid=fid)

    def _decode(self, token: str) -> dict[str, Any]:
        try:
            signing_key = self._jwks_client.get_signing_key_from_jwt(token)
            return jwt.decode(
                token,
                signing_key.key,
                algorithms=self.algorithms,
                audience=self.domain,
                issuer=self.issuer,
                options={"require": ["exp", "sub"]},
            )
        except (jwt.PyJWTError, ValueError) as exc:
            logger.info("Rejected Quick Auth token", extra={"reason": type(exc).__name__})
            raise UnauthorizedError() from exc

    @staticmethod
    def _fid_from_claims(claims: dict[str, Any]) -> int | None:
        raw_fid = claims.get("fid")
        if isinstance(raw_fid, int) and not isinstance(raw_fid, bool):
            fid = raw_fid
        else:
            try:
                fid = int(str(claims.get("sub", "")))
            except ValueError:
                return None
        return fid if fid > 0 else None


__all__ = [
    "AuthContext",
    "QuickAuthVerifier",
    "SigningKeyResolver",
    "TokenVerifier",
    "UnauthorizedError",
    "bearer_token",
]
