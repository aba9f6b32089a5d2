"""Shared fixtures: an in-memory document store + identity service behind httpx.MockTransport."""

import json
from typing import Any, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient
from pydantic_ai.messages import ModelMessage, ModelResponse, TextPart
from pydantic_ai.models.function import AgentInfo, FunctionModel

from havenhub.api.deps import get_insight_generator, get_store
from havenhub.auth.dependencies import get_identity
from havenhub.auth.identity_client import IdentityClient
from havenhub.core.config import Settings, get_settings
from havenhub.firestore.client import DocumentStore
from havenhub.insights.model_client import InsightGenerator
from havenhub.main import app

PROJECT = "demo-haven"
ROOT = f"projects/{PROJECT}/databases/(default)/documents"
TOKEN = "good-token"
UID = "u1"
EMAIL = "u1@example.edu"


def _error(status: int, message: str) -> httpx.Response:
    return httpx.Response(status, json={"error": {"code": status, "message": message}})


class FakeUpstream:
    """Just enough of the document store and identity REST surfaces for the routes."""

    def __init__(self):
        self.docs: Dict[str, Dict[str, Any]] = {}
        self.requests: List[httpx.Request] = []
        self.tokens: Dict[str, Dict[str, str]] = {TOKEN: {"localId": UID, "email": EMAIL}}
        self.accounts: Dict[str, Dict[str, str]] = {}
        self.display_names: Dict[str, str] = {}
        self.failing: set = set()
        self._auto = 0

    # ---- helpers for tests ----
    def put(self, path: str, fields: Dict[str, Any]) -> None:
        self.docs[path] = {"name": f"{ROOT}/{path}", "fields": fields}

    def children(self, collection: str) -> List[str]:
        depth = collection.count("/") + 1
        return sorted(p for p in self.docs if p.startswith(collection + "/") and p.count("/") == depth)

    # ---- transport entry point ----
    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if "identitytoolkit" in request.url.host:
            return self._identity(request)
        return self._store(request)

    def _store(self, request: httpx.Request) -> httpx.Response:
        rest = request.url.path.split("/documents", 1)[1]
        if rest == ":commit":
            body = json.loads(request.content)
            for w in body["writes"]:
                name = w["update"]["name"]
                self.docs[name.split("/documents/", 1)[1]] = {"name": name, "fields": w["update"]["fields"]}
            return httpx.Response(200, json={"writeResults": [{} for _ in body["writes"]]})

        rel = rest.strip("/")
        if rel in self.failing:
            return _error(500, "INTERNAL")
        is_collection = rel.count("/") % 2 == 0
        method = request.method

        if method == "GET" and is_collection:
            names = self.children(rel)
            if not names:
                return _error(404, "NOT_FOUND")
            size = int(request.url.params.get("pageSize", "300"))
            start = int(request.url.params.get("pageToken", "0"))
            page = names[start:start + size]
            body: Dict[str, Any] = {"documents": [self.docs[n] for n in page]}
            if start + size < len(names):
                body["nextPageToken"] = str(start + size)
            return httpx.Response(200, json=body)
        if method == "GET":
            if rel not in self.docs:
                return _error(404, "NOT_FOUND")
            return httpx.Response(200, json=self.docs[rel])
        if method == "POST" and is_collection:
            self._auto += 1
            path = f"{rel}/auto{self._auto}"
            self.put(path, json.loads(request.content)["fields"])
            return httpx.Response(200, json=self.docs[path])
        if method == "PATCH":
            fields = json.loads(request.content).get("fields", {})
            mask = request.url.params.get_list("updateMask.fieldPaths")
            if request.url.params.get("currentDocument.exists") == "true" and rel not in self.docs:
                return _error(404, "NOT_FOUND")
            if mask:
                merged = dict(self.docs.get(rel, {}).get("fields", {}))
                for k in mask:
                    if k in fields:
                        merged[k] = fields[k]
                    else:
                        merged.pop(k, None)
                fields = merged
            self.put(rel, fields)
            return httpx.Response(200, json=self.docs[rel])
        if method == "DELETE":
            self.docs.pop(rel, None)
            return httpx.Response(200, json={})
        return _error(400, "UNSUPPORTED")

    def _identity(self, request: httpx.Request) -> httpx.Response:
        action = request.url.path.rsplit(":", 1)[-1]
        body = json.loads(request.content)
        if action == "lookup":
            user = self.tokens.get(body.get("idToken"))
            if not user:
                return _error(400, "INVALID_ID_TOKEN")
            return httpx.Response(200, json={"users": [user]})
        if action == "signInWithPassword":
            account = self.accounts.get(body["email"])
            if not account:
                return _error(400, "EMAIL_NOT_FOUND")
            if account["password"] != body["password"]:
                return _error(400, "INVALID_PASSWORD")
            return httpx.Response(200, json=self._session(account["localId"], body["email"]))
        if action == "signUp":
            if body["email"] in self.accounts:
                return _error(400, "EMAIL_EXISTS")
            uid = f"uid{len(self.accounts) + 1}"
            self.accounts[body["email"]] = {"localId": uid, "password": body["password"]}
            return httpx.Response(200, json=self._session(uid, body["email"]))
        if action == "update":
            user = self.tokens.get(body.get("idToken"))
            if not user:
                return _error(400, "INVALID_ID_TOKEN")
            self.display_names[user["localId"]] = body["displayName"]
            return httpx.Response(200, json={"localId": user["localId"], "displayName": body["displayName"]})
        return _error(400, "UNSUPPORTED")

    def _session(self, uid: str, email: str) -> Dict[str, Any]:
        token = f"tok-{uid}"
        self.tokens[token] = {"localId": uid, "email": email}
        return {"localId": uid, "email": email, "idToken": token, "refreshToken": f"ref-{uid}", "expiresIn": "3600"}


class FakeModel:
    """Canned model output; set `text` or `error` per test."""

    def __init__(self):
        self.text = '["Close to campus", "Good value", "Quiet street"]'
        self.error: Optional[Exception] = None
        self.prompts: List[str] = []

    def __call__(self, messages: List[ModelMessage], info: AgentInfo) -> ModelResponse:
        self.prompts.append(str(messages[-1]))
        if self.error is not None:
            raise self.error
        return ModelResponse(parts=[TextPart(self.text)])


@pytest.fixture
def settings() -> Settings:
    s = Settings()
    s.FIREBASE_PROJECT_ID = PROJECT
    s.FIREBASE_API_KEY = "test-key"
    s.FIRESTORE_BASE_URL = "https://firestore.googleapis.com/v1"
    s.IDENTITY_BASE_URL = "https://identitytoolkit.googleapis.com/v1"
    s.GEMINI_API_KEY = ""
    s.PAGE_SIZE = 300
    return s


@pytest.fixture
def fake() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def fake_model() -> FakeModel:
    return FakeModel()


@pytest.fixture
def client(settings, fake, fake_model):
    transport = httpx.MockTransport(fake.handle)

    async def _store():
        store = DocumentStore(settings, transport=transport)
        try:
            yield store
        finally:
            await store.close()

    async def _identity():
        identity = IdentityClient(settings, transport=transport)
        try:
            yield identity
        finally:
            await identity.close()

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_store] = _store
    app.dependency_overrides[get_identity] = _identity
    app.dependency_overrides[get_insight_generator] = lambda: InsightGenerator(settings, model=FunctionModel(fake_model))
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> Dict[str, str]:
    return {"Authorization": f"Bearer {TOKEN}"}
