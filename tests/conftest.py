from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from miniapp_builder.api import create_app
from miniapp_builder.project_store import InMemoryProjectStore
from miniapp_builder.quick_auth import AuthContext, UnauthorizedError

ALICE = "0x" + "a" * 40
BOB = "0x" + "b" * 40

TOKENS = {
    "alice-token": AuthContext(wallet=ALICE, fid=101),
    "bob-token": AuthContext(wallet=BOB, fid=202),
}


class StubVerifier:
    def verify(self, token: str | None) -> AuthContext:
        if token not in TOKENS:
            raise UnauthorizedError()
        return TOKENS[token]


@pytest.fixture
def store() -> InMemoryProjectStore:
    return InMemoryProjectStore()


@pytest.fixture
def make_client(store: InMemoryProjectStore):
    def factory(**options) -> TestClient:
        return TestClient(create_app(store=store, verifier=StubVerifier(), **options))

    return factory


@pytest.fixture
def client(make_client) -> TestClient:
    return make_client()


@pytest.fixture
def alice_headers() -> dict[str, str]:
    return {"Authorization": "Bearer alice-token"}


@pytest.fixture
def bob_headers() -> dict[str, str]:
    return {"Authorization": "Bearer bob-token"}
