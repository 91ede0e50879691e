from __future__ import annotations

from typing import Annotated, Literal, Sequence, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StrictStr

from ..urls import encodes_as_utf8, is_https_url

COMPONENT_TYPES = frozenset({"text", "button", "wallet_connect"})


def _require_non_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    if not encodes_as_utf8(value):
        raise ValueError("must be valid UTF-8 text")
    return value


def _require_https_url(value: str) -> str:
    if not is_https_url(value):
        raise ValueError("must be an absolute https URL")
    return value


NonBlankStr = Annotated[StrictStr, AfterValidator(_require_non_blank)]
HttpsUrlStr = Annotated[StrictStr, AfterValidator(_require_https_url)]


class TextComponent(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    content: NonBlankStr


class ButtonComponent(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["button"] = "button"
    label: NonBlankStr
    url: HttpsUrlStr


class WalletConnectComponent(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["wallet_connect"] = "wallet_connect"


RuntimeComponent = Annotated[
    Union[TextComponent, ButtonComponent, WalletConnectComponent],
    Field(discriminator="type"),
]


class RuntimeConfiguration(BaseModel):
    components: Sequence[RuntimeComponent] = Field(default_factory=list)


__all__ = [
    "COMPONENT_TYPES",
    "ButtonComponent",
    "RuntimeComponent",
    "RuntimeConfiguration",
    "TextComponent",
    "WalletConnectComponent",
]
