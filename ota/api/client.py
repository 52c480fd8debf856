"""GraphQL transport.

This module provides:
- GraphqlClient: Protocol for executing operations (injectable for tests)
- HttpGraphqlClient: Real implementation using urllib
- MockGraphqlClient: Canned responses keyed by operation name
"""

from __future__ import annotations

import json
import re
import ssl
import urllib.error
import urllib.request
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from ota.core.result import Err, Ok, Result
from ota.core.structured import StrDict, as_obj_list, as_str_dict, get_str

__all__ = [
    "GraphqlClient",
    "GraphqlError",
    "HttpGraphqlClient",
    "MockGraphqlClient",
    "operation_name",
]

_OPERATION_RE = re.compile(r"\b(?:query|mutation)\s+([A-Za-z_][A-Za-z0-9_]*)")


def operation_name(query: str) -> str:
    """Extract `Name` from `query Name(...)` / `mutation Name(...)`."""
    match = _OPERATION_RE.search(query)
    return match.group(1) if match else ""


@dataclass(frozen=True, slots=True)
class GraphqlError:
    """A failed GraphQL request.

    Attributes:
        operation: Operation name that failed
        message: Human-readable error message
        status: HTTP status code (0 for transport or payload errors)
        codes: `extensions.errorCode` values reported by the server
    """

    operation: str
    message: str
    status: int = 0
    codes: tuple[str, ...] = ()

    def __str__(self) -> str:
        if self.status:
            return f"{self.operation}: HTTP {self.status}: {self.message}"
        return f"{self.operation}: {self.message}"


@runtime_checkable
class GraphqlClient(Protocol):
    """Executes one GraphQL operation and returns its `data` object."""

    def execute(
        self, query: str, variables: Mapping[str, object]
    ) -> Result[StrDict, GraphqlError]: ...


def _errors_from_payload(operation: str, payload: StrDict) -> GraphqlError | None:
    errors = as_obj_list(payload.get("errors"))
    if not errors:
        return None

    messages: list[str] = []
    codes: list[str] = []
    for item in errors:
        entry = as_str_dict(item)
        if entry is None:
            continue
        msg = get_str(entry, "message")
        if msg:
            messages.append(msg)
        ext = as_str_dict(entry.get("extensions")) or {}
        code = get_str(ext, "errorCode")
        if code:
            codes.append(code)

    return GraphqlError(
        operation=operation,
        message="; ".join(messages) or "GraphQL request failed",
        codes=tuple(codes),
    )


class HttpGraphqlClient:
    """GraphQL over HTTPS POST with a bearer token."""

    def __init__(
        self,
        url: str,
        *,
        token: str | None,
        timeout: float = 30.0,
        user_agent: str = "ota-cli",
    ) -> None:
        self.url = url
        self.token = token
        self.timeout = timeout
        self.user_agent = user_agent
        self._ssl_context = ssl.create_default_context()

    def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def execute(self, query: str, variables: Mapping[str, object]) -> Result[StrDict, GraphqlError]:
        operation = operation_name(query)
        body = json.dumps(
            {"query": query, "variables": dict(variables), "operationName": operation or None}
        ).encode("utf-8")

        try:
            req = urllib.request.Request(
                self.url, data=body, headers=self._headers(), method="POST"
            )
            with urllib.request.urlopen(
                req, timeout=self.timeout, context=self._ssl_context
            ) as response:
                raw: bytes = response.read()
        except urllib.error.HTTPError as e:
            # The API reports GraphQL errors with a 4xx body; prefer its message.
            detail = self._error_body(operation, e)
            if detail is not None:
                return Err(
                    GraphqlError(
                        operation=operation,
                        message=detail.message,
                        status=e.code,
                        codes=detail.codes,
                    )
                )
            return Err(GraphqlError(operation=operation, message=str(e.reason), status=e.code))
        except urllib.error.URLError as e:
            return Err(GraphqlError(operation=operation, message=str(e.reason)))
        except TimeoutError:
            return Err(GraphqlError(operation=operation, message="Request timed out"))
        except OSError as e:
            return Err(GraphqlError(operation=operation, message=str(e)))

        return self._parse(operation, raw)

    def _error_body(self, operation: str, error: urllib.error.HTTPError) -> GraphqlError | None:
        try:
            payload = as_str_dict(json.loads(error.read().decode("utf-8")))
        except (OSError, json.JSONDecodeError, UnicodeDecodeError):
            return None
        if payload is None:
            return None
        return _errors_from_payload(operation, payload)

    def _parse(self, operation: str, raw: bytes) -> Result[StrDict, GraphqlError]:
        try:
            payload = as_str_dict(json.loads(raw.decode("utf-8")))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return Err(GraphqlError(operation=operation, message=f"invalid JSON response: {e}"))
        if payload is None:
            return Err(GraphqlError(operation=operation, message="expected a JSON object"))

        failure = _errors_from_payload(operation, payload)
        if failure is not None:
            return Err(failure)

        data = as_str_dict(payload.get("data"))
        if data is None:
            return Err(GraphqlError(operation=operation, message="response has no data"))
        return Ok(data)


type MockResponse = (
    StrDict | GraphqlError | Callable[[Mapping[str, object]], StrDict | GraphqlError]
)


def _empty_calls() -> list[tuple[str, StrDict]]:
    return []


def _empty_responses() -> dict[str, MockResponse]:
    return {}


@dataclass
class MockGraphqlClient:
    """Mock client for tests.

    Responses are registered per operation name; a callable response
    receives the variables, which lets a test keep server-side state.

    Usage:
        client = MockGraphqlClient()
        client.set("ViewBranchQuery", {"app": {"byId": {"updateBranchByName": None}}})
        client.execute(VIEW_BRANCH_QUERY, {"appId": "1234", "name": "main"})
    """

    responses: dict[str, MockResponse] = field(default_factory=_empty_responses)
    calls: list[tuple[str, StrDict]] = field(default_factory=_empty_calls)

    def set(self, operation: str, response: MockResponse) -> None:
        self.responses[operation] = response

    def execute(self, query: str, variables: Mapping[str, object]) -> Result[StrDict, GraphqlError]:
        operation = operation_name(query)
        self.calls.append((operation, dict(variables)))

        if operation not in self.responses:
            return Err(GraphqlError(operation=operation, message="no mock response", status=404))

        response = self.responses[operation]
        if callable(response):
            response = response(variables)
        if isinstance(response, GraphqlError):
            return Err(response)
        return Ok(response)

    def calls_for(self, operation: str) -> list[StrDict]:
        """Variables of every call made for `operation`, in order."""
        return [variables for name, variables in self.calls if name == operation]
