"""Runtime configuration helpers.

Every environment-driven switch lives here so the rest of the service imports
one cached Settings instance (via get_settings, also used as a FastAPI
dependency so tests can swap it out).

Env vars (optional) and their roles:
        FIREBASE_PROJECT_ID -> Project that owns the document database.
        FIREBASE_API_KEY    -> Web API key for the document store and identity REST calls.
        FIRESTORE_BASE_URL  -> Document store REST root (override for emulators).
        IDENTITY_BASE_URL   -> Identity REST root (override for emulators).
        GEMINI_API_KEY      -> Key for the generative model; insights are disabled without it.
        GEMINI_MODEL        -> Model name used for listing insights.
        HTTP_TIMEOUT        -> Seconds before an upstream call gives up.
        PAGE_SIZE           -> Page size used when listing collections.
        DEBUG_UPSTREAM      -> Log upstream error bodies at debug level.
        LOG_LEVEL           -> Root log level when started via `python -m havenhub.main`.
        PORT                -> Listen port for the same entry point.
"""

import os
from functools import lru_cache
from dotenv import load_dotenv

load_dotenv()

class Settings:
        """Central runtime switches.

        Values are read once at process start and memoized via get_settings().
        Missing credentials are not fatal here: the store client and the
        insight generator complain when they are actually needed.
        """

        # ---- Document store / identity ----
        FIREBASE_PROJECT_ID: str = os.getenv("FIREBASE_PROJECT_ID", "")
        FIREBASE_API_KEY: str = os.getenv("FIREBASE_API_KEY", "")
        FIRESTORE_BASE_URL: str = os.getenv("FIRESTORE_BASE_URL", "https://firestore.googleapis.com/v1")
        IDENTITY_BASE_URL: str = os.getenv("IDENTITY_BASE_URL", "https://identitytoolkit.googleapis.com/v1")

        # ---- Generative model ----
        GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
        GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

        # ---- Upstream call guards ----
        HTTP_TIMEOUT: float = float(os.getenv("HTTP_TIMEOUT", "20"))
        PAGE_SIZE: int = int(os.getenv("PAGE_SIZE", "300"))

        # ---- Diagnostics / process ----
        DEBUG_UPSTREAM: bool = os.getenv("DEBUG_UPSTREAM", "0") in {"1", "true", "True"}
        LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
        PORT: int = int(os.getenv("PORT", "5001"))


@lru_cache
def get_settings() -> Settings:
        """Return cached singleton Settings instance."""
        return Settings()
