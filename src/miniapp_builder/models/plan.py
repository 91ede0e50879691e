from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping

logger = logging.getLogger(__name__)


class PlanId(str, Enum):
    basic = "basic"
    pro = "pro"


class WalletConnectMode(str, Enum):
    functional = "functional"
    placeholder = "placeholder"


@dataclass(frozen=True)
class PlanEntitlements:
    component_limit: int
    wallet_connect: bool


# Limits and the wallet-connect gate both come from this table; a new tier
# needs exactly one entry here.
PLAN_ENTITLEMENTS: Mapping[PlanId, PlanEntitlements] = MappingProxyType(
    {
        PlanId.basic: PlanEntitlements(component_limit=5, wallet_connect=False),
        PlanId.pro: PlanEntitlements(component_limit=25, wallet_connect=True),
    }
)

DEFAULT_PLAN = PlanId.basic


def parse_plan_id(value: object) -> PlanId | None:
    """Return the matching PlanId, or None when the value is not a known plan."""
    if isinstance(value, PlanId):
        return value
    if not isinstance(value, str):
        return None
    try:
        return PlanId(value)
    except ValueError:
        return None


def entitlements_for(plan: PlanId | str | None) -> PlanEntitlements:
    """Resolve the entitlements of a plan, falling back to the basic tier."""
    plan_id = parse_plan_id(plan)
    if plan_id is None:
        logger.debug("Unknown plan id, using basic entitlements", extra={"plan_id": str(plan)})
        plan_id = DEFAULT_PLAN
    return PLAN_ENTITLEMENTS[plan_id]


def component_limit(plan: PlanId | str | None) -> int:
    return entitlements_for(plan).component_limit


def wallet_connect_mode(plan: PlanId | str | None) -> WalletConnectMode:
    if entitlements_for(plan).wallet_connect:
        return WalletConnectMode.functional
    return WalletConnectMode.placeholder


__all__ = [
    "DEFAULT_PLAN",
    "PLAN_ENTITLEMENTS",
    "PlanEntitlements",
    "PlanId",
    "WalletConnectMode",
    "component_limit",
    "entitlements_for",
    "parse_plan_id",
    "wallet_connect_mode",
]
