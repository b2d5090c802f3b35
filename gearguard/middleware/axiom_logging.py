"""API 접근 로깅 미들웨어 (Axiom 연동).

API access logging middleware.
Every request produces one access log line; when Axiom is configured the
same structured event (method, path, status, duration, masked body, error
code and detail) is also ingested into the Axiom dataset.
"""

import json
import logging
import re
import time
from typing import Any

from axiom_py import Client as AxiomClient
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from gearguard.config import settings

logger = logging.getLogger("gearguard.access")

# 마스킹 대상 필드 패턴 (Fields masked in logged bodies)
_SENSITIVE_KEYS = re.compile(
    r"(password|passwd|secret|token|authorization|api_key|apikey|credential)",
    re.IGNORECASE,
)

# 로깅 제외 경로 (Paths excluded from logging)
_SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}

_API_PREFIX = "/api/v1/"
_UUID_SEGMENT = re.compile(r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$")
_ERROR_TEXT_LIMIT = 500


def mask_sensitive(data: Any, depth: int = 0) -> Any:
    """민감 필드 재귀 마스킹 (Recursively mask sensitive keys in dicts/lists)."""
    if depth > 5:
        return "..."
    if isinstance(data, dict):
        return {
            k: "***" if _SENSITIVE_KEYS.search(str(k)) else mask_sensitive(v, depth + 1)
            for k, v in data.items()
        }
    if isinstance(data, list):
        return [mask_sensitive(item, depth + 1) for item in data[:20]]
    if isinstance(data, str) and len(data) > 2000:
        return data[:2000] + "...(truncated)"
    return data


def describe_path(path: str) -> dict[str, str]:
    """경로에서 리소스 이름과 대상 ID 추출.

    ``/api/v1/maintenance-requests/<uuid>/status`` yields
    ``{"resource": "maintenance-requests", "resource_id": "<uuid>"}``.
    Paths outside the API prefix yield an empty dict.
    """
    if not path.startswith(_API_PREFIX):
        return {}
    segments = [s for s in path[len(_API_PREFIX):].split("/") if s]
    if not segments:
        return {}
    fields = {"resource": segments[0]}
    for segment in segments[1:]:
        if _UUID_SEGMENT.match(segment):
            fields["resource_id"] = segment.lower()
            break
    return fields


def error_fields(body: bytes) -> dict[str, str]:
    """에러 응답 본문에서 detail/code 추출 (Pull detail and code from an error body)."""
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {"error": body.decode("utf-8", errors="replace")[:_ERROR_TEXT_LIMIT]}
    if not isinstance(payload, dict):
        return {"error": str(payload)[:_ERROR_TEXT_LIMIT]}
    fields = {"error": str(payload.get("detail", payload))[:_ERROR_TEXT_LIMIT]}
    if payload.get("code"):
        fields["error_code"] = str(payload["code"])
    return fields


class AxiomLoggingMiddleware(BaseHTTPMiddleware):
    """모든 API 요청/응답을 로깅하는 미들웨어.

    Middleware logging every API request to the access logger and, when
    configured, to Axiom.
    """

    def __init__(self, app: Any) -> None:
        super().__init__(app)
        self._client: AxiomClient | None = None
        self._dataset: str = settings.AXIOM_DATASET

        if settings.AXIOM_API_TOKEN and settings.AXIOM_DATASET:
            self._client = AxiomClient(token=settings.AXIOM_API_TOKEN)

    async def _read_body(self, request: Request) -> Any:
        if request.method not in ("POST", "PUT", "PATCH"):
            return None
        body_bytes = await request.body()
        if not body_bytes:
            return None
        try:
            return mask_sensitive(json.loads(body_bytes))
        except (json.JSONDecodeError, UnicodeDecodeError):
            return "(non-json body)"

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in _SKIP_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        request_body = await self._read_body(request)

        event: dict[str, Any] = {
            "method": request.method,
            "path": request.url.path,
            "status_code": 500,
            **describe_path(request.url.path),
        }
        if request.query_params:
            event["query_params"] = mask_sensitive(dict(request.query_params))
        if request_body is not None:
            event["request_body"] = request_body

        try:
            response = await call_next(request)
            event["status_code"] = response.status_code

            # 에러 응답의 code/detail 추출 (Capture code/detail of error responses)
            if response.status_code >= 400:
                resp_body = b""
                async for chunk in response.body_iterator:
                    resp_body += chunk if isinstance(chunk, bytes) else chunk.encode("utf-8")
                event.update(error_fields(resp_body))

                # 소비한 body를 다시 응답으로 반환 (Re-wrap the consumed body)
                response = Response(
                    content=resp_body,
                    status_code=response.status_code,
                    headers=dict(response.headers),
                    media_type=response.media_type,
                )
        except Exception as exc:
            event["error"] = f"{type(exc).__name__}: {str(exc)[:300]}"
            raise
        finally:
            event["duration_ms"] = round((time.perf_counter() - start_time) * 1000, 2)
            logger.info(
                "%s %s %s %.2fms%s",
                event["method"], event["path"], event["status_code"], event["duration_ms"],
                f" {event['error_code']}" if "error_code" in event else "",
            )
            self._ingest(event)

        return response

    def _ingest(self, event: dict[str, Any]) -> None:
        if self._client is None:
            return
        try:
            self._client.ingest_events(self._dataset, [event])
        except Exception:
            # 수집 실패는 경고만 남김 (Ingest failures are only logged)
            logger.warning("Axiom ingest failed for %s %s", event["method"], event["path"], exc_info=True)
