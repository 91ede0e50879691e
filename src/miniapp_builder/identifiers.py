from __future__ import annotations

import re

SLUG_PATTERN = re.compile(r"^[a-z0-9-]{3,48}$")
WALLET_PATTERN = re.compile(r"^0x[a-f0-9]{40}$")


def is_valid_slug(slug: str) -> bool:
    return SLUG_PATTERN.fullmatch(slug) is not None


def normalize_wallet(wallet: str) -> str:
    return wallet.strip().lower()


def is_valid_wallet(wallet: str) -> bool:
    return WALLET_PATTERN.fullmatch(wallet) is not None


__all__ = ["is_valid_slug", "is_valid_wallet", "normalize_wallet"]
