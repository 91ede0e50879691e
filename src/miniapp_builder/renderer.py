from __future__ import annotations

from typing import Literal, Sequence

from pydantic import BaseModel

from .models.components import ButtonComponent, RuntimeComponent, TextComponent, WalletConnectComponent
from .models.plan import PlanId, WalletConnectMode, wallet_connect_mode
from .urls import is_https_url

WALLET_CONNECT_PLACEHOLDER = "Pro required for wallet connect."


class RenderBlock(BaseModel):
    kind: Literal["text", "link", "wallet_connect", "placeholder"]
    text: str | None = None
    href: str | None = None


def render_components(components: Sequence[RuntimeComponent], plan: PlanId | str | None) -> list[RenderBlock]:
    """Turn sanitized components into render blocks for the runtime surface.

    Components are assumed to come from the sanitizer; only the wallet-connect
    plan gate and a last https check on links are applied here.
    """
    gate = wallet_connect_mode(plan)
    blocks: list[RenderBlock] = []

    for component in components:
        if isinstance(component, TextComponent):
            blocks.append(RenderBlock(kind="text", text=component.content))
        elif isinstance(component, ButtonComponent):
            if not is_https_url(component.url):
                continue
            blocks.append(RenderBlock(kind="link", text=component.label, href=component.url))
        elif isinstance(component, WalletConnectComponent):
            if gate is WalletConnectMode.functional:
                blocks.append(RenderBlock(kind="wallet_connect"))
            else:
                blocks.append(RenderBlock(kind="placeholder", text=WALLET_CONNECT_PLACEHOLDER))

    return blocks


__all__ = ["RenderBlock", "WALLET_CONNECT_PLACEHOLDER", "render_components"]
