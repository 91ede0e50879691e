from __future__ import annotations

import os

from miniapp_builder.api import create_app
from miniapp_builder.firestore_project_store import FirestoreProjectStore
from miniapp_builder.logging_config import setup_logging
from miniapp_builder.project_store import InMemoryProjectStore, ProjectStore
from miniapp_builder.quick_auth import DEFAULT_ISSUER, DEFAULT_JWKS_URL, QuickAuthVerifier

# Environment configuration
ENVIRONMENT = os.getenv("ENVIRONMENT", "dev")
PROJECT_ID = os.getenv("PROJECT_ID")
QUICK_AUTH_DOMAIN = os.getenv("QUICK_AUTH_DOMAIN")
QUICK_AUTH_ISSUER = os.getenv("QUICK_AUTH_ISSUER", DEFAULT_ISSUER)
QUICK_AUTH_JWKS_URL = os.getenv("QUICK_AUTH_JWKS_URL", DEFAULT_JWKS_URL)

# Setup logging
setup_logging(environment=ENVIRONMENT, project_id=PROJECT_ID)

# Use Firestore in production, in-memory for dev
store: ProjectStore
if ENVIRONMENT == "dev":
    store = InMemoryProjectStore()
else:
    store = FirestoreProjectStore(project_id=PROJECT_ID)

verifier = QuickAuthVerifier(
    domain=QUICK_AUTH_DOMAIN,
    issuer=QUICK_AUTH_ISSUER,
    jwks_url=QUICK_AUTH_JWKS_URL,
)

app = create_app(store=store, verifier=verifier, gcp_project_id=PROJECT_ID)
