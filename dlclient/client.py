"""
Direct Line API client built from the service's Swagger 2.0 description.

The document is fetched once at startup; every operation it declares becomes
callable by ``operationId``. The Direct Line operations used by the console
are wrapped in typed helpers.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import aiohttp
from loguru import logger

from dlclient.activity import Activity
from dlclient.errors import OperationError, SchemaError


OP_GENERATE_TOKEN = "Tokens_GenerateTokenForNewConversation"
OP_START_CONVERSATION = "Conversations_StartConversation"
OP_POST_ACTIVITY = "Conversations_PostActivity"

_HTTP_METHODS = ("get", "put", "post", "delete", "patch", "head", "options")


@dataclass(frozen=True)
class Parameter:
    name: str
    location: str            # "path" | "query" | "header" | "body"
    required: bool = False


@dataclass(frozen=True)
class Operation:
    operation_id: str
    method: str
    path: str
    parameters: tuple[Parameter, ...] = ()


def parse_operations(spec: dict[str, Any]) -> dict[str, Operation]:
    """Index the operations of a Swagger document by operationId."""
    paths = spec.get("paths")
    if not isinstance(paths, dict):
        raise SchemaError("API description has no 'paths' object")

    operations: dict[str, Operation] = {}
    for path, item in paths.items():
        if not isinstance(item, dict):
            continue
        shared = item.get("parameters") or []
        for method in _HTTP_METHODS:
            op = item.get(method)
            if not isinstance(op, dict) or not op.get("operationId"):
                continue
            params = [
                Parameter(
                    name=p["name"],
                    location=p.get("in", "query"),
                    required=bool(p.get("required")) or p.get("in") == "path",
                )
                for p in [*shared, *(op.get("parameters") or [])]
                if isinstance(p, dict) and "name" in p
            ]
            operations[op["operationId"]] = Operation(
                operation_id=op["operationId"],
                method=method.upper(),
                path=path,
                parameters=tuple(params),
            )
    return operations


def base_url_from_spec(spec: dict[str, Any]) -> str:
    host = spec.get("host")
    if not host:
        raise SchemaError("API description has no 'host'")
    schemes = spec.get("schemes") or ["https"]
    scheme = "https" if "https" in schemes else schemes[0]
    base_path = (spec.get("basePath") or "").rstrip("/")
    return f"{scheme}://{host}{base_path}"


class DirectLineClient:
    """
    Operation client for the Direct Line REST API.

    Args:
        spec: Parsed Swagger document.
        http: aiohttp session used for every request (owned by the caller).
        base_url: Override for the scheme/host/basePath in the document.

    Usage::

        client = await DirectLineClient.from_url(http, spec_url)
        token = await client.generate_token(secret)
        client.set_authorization(token)
        conversation = await client.start_conversation()
    """

    def __init__(
        self,
        spec: dict[str, Any],
        http: aiohttp.ClientSession,
        *,
        base_url: str | None = None,
    ) -> None:
        self._http = http
        self._operations = parse_operations(spec)
        self._base_url = (base_url or base_url_from_spec(spec)).rstrip("/")
        self._authorization: str | None = None
        logger.debug(
            f"[client] {len(self._operations)} operations loaded, base_url={self._base_url}"
        )

    @classmethod
    async def from_url(
        cls,
        http: aiohttp.ClientSession,
        url: str,
        *,
        base_url: str | None = None,
    ) -> "DirectLineClient":
        """Fetch the API description from ``url`` and build a client from it."""
        async with http.get(url) as resp:
            resp.raise_for_status()
            raw = await resp.text()
        try:
            spec = json.loads(raw.strip())
        except json.JSONDecodeError as exc:
            raise SchemaError(f"API description at {url} is not valid JSON: {exc}") from exc
        if not isinstance(spec, dict):
            raise SchemaError(f"API description at {url} is not a JSON object")
        return cls(spec, http, base_url=base_url)

    @property
    def operations(self) -> dict[str, Operation]:
        return dict(self._operations)

    @property
    def base_url(self) -> str:
        return self._base_url

    def set_authorization(self, token: str) -> None:
        """Send ``Authorization: Bearer <token>`` with every following call."""
        self._authorization = f"Bearer {token}"

    # ------------------------------------------------------------------
    # Generic operation call
    # ------------------------------------------------------------------

    async def call(
        self,
        operation_id: str,
        *,
        headers: dict[str, str] | None = None,
        **params: Any,
    ) -> Any:
        """Invoke an operation by id and return its decoded JSON body (or None)."""
        op = self._operations.get(operation_id)
        if op is None:
            raise SchemaError(f"Unknown operation {operation_id!r}")

        known = {p.name for p in op.parameters}
        unknown = set(params) - known
        if unknown:
            raise SchemaError(f"{operation_id}: unexpected parameters {sorted(unknown)}")

        path = op.path
        query: dict[str, str] = {}
        req_headers: dict[str, str] = {}
        if self._authorization:
            req_headers["Authorization"] = self._authorization
        body: Any = None

        for p in op.parameters:
            if p.name not in params:
                if p.required:
                    raise SchemaError(f"{operation_id}: missing required parameter {p.name!r}")
                continue
            value = params[p.name]
            if p.location == "path":
                path = path.replace("{" + p.name + "}", quote(str(value), safe=""))
            elif p.location == "query":
                query[p.name] = str(value)
            elif p.location == "header":
                req_headers[p.name] = str(value)
            elif p.location == "body":
                body = value.to_dict() if hasattr(value, "to_dict") else value

        if headers:
            req_headers.update(headers)

        url = self._base_url + path
        logger.debug(f"[client] {op.method} {url} ({operation_id})")

        async with self._http.request(
            op.method,
            url,
            params=query or None,
            json=body,
            headers=req_headers,
        ) as resp:
            text = await resp.text()
            try:
                payload = json.loads(text) if text.strip() else None
            except json.JSONDecodeError:
                payload = text
            if resp.status >= 400:
                raise OperationError(operation_id, resp.status, payload)
            return payload

    # ------------------------------------------------------------------
    # Direct Line operations
    # ------------------------------------------------------------------

    async def generate_token(self, secret: str) -> str:
        """Exchange the bot secret for a short-lived conversation token."""
        data = await self.call(
            OP_GENERATE_TOKEN,
            headers={"Authorization": f"Bearer {secret}"},
        )
        if not isinstance(data, dict) or not data.get("token"):
            raise OperationError(OP_GENERATE_TOKEN, 200, data)
        return data["token"]

    async def start_conversation(self) -> dict[str, Any]:
        """Open a new conversation; returns the raw conversation object."""
        data = await self.call(OP_START_CONVERSATION)
        if not isinstance(data, dict) or not data.get("conversationId"):
            raise OperationError(OP_START_CONVERSATION, 200, data)
        return data

    async def post_activity(self, conversation_id: str, activity: Activity) -> Any:
        return await self.call(
            OP_POST_ACTIVITY,
            conversationId=conversation_id,
            activity=activity,
        )
