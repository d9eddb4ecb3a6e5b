"""
HTTP transport for the BizNews tools.

Serves a JSON-RPC 2.0 endpoint at POST /mcp with the initialize, tools/list
and tools/call methods. Paid tools only run once the attached payment has
been verified by the payment gate.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from biznews.config import Config
from biznews.errors import BizNewsError, ConfigurationError, PaymentError
from biznews.providers.factory import build_provider
from biznews.services.llm import RelevanceFilter
from biznews.services.payment import X402_VERSION, PaymentGate, decode_payment
from biznews.tools import NewsTools, tool_result

logger = logging.getLogger(__name__)

SERVER_NAME = "biznews-mcp"
SERVER_VERSION = "1.0.0"
PROTOCOL_VERSION = "2025-03-26"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
PAYMENT_REQUIRED = 402


@dataclass(frozen=True)
class Tool:
    name: str
    description: str
    handler: Callable[[], Dict[str, Any]]
    price: Optional[str] = None

    def describe(self) -> Dict[str, Any]:
        info: Dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "inputSchema": {"type": "object", "properties": {}},
        }
        if self.price:
            info["annotations"] = {"paymentHint": True, "price": self.price}
        return info


class RPCError(Exception):
    def __init__(self, code: int, message: str, data: Any = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def to_dict(self) -> Dict[str, Any]:
        error: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error


def build_tools(config: Config, news_tools: NewsTools) -> List[Tool]:
    return [
        Tool(
            name="news",
            description="Return unfiltered top US headlines",
            handler=news_tools.news,
        ),
        Tool(
            name="business_news",
            description=(
                "Fetch top US headlines and filter for business-relevant opportunities"
            ),
            handler=news_tools.business_news,
            price=config.business_news_price,
        ),
    ]


def _payment_from(request: Request, params: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    header = request.headers.get("x-payment")
    if header:
        return decode_payment(header)
    meta = params.get("_meta") or {}
    attached = meta.get("x402/payment") if isinstance(meta, dict) else None
    if isinstance(attached, dict):
        return attached
    if isinstance(attached, str) and attached:
        return decode_payment(attached)
    return None


def create_app(
    config: Config,
    news_tools: Optional[NewsTools] = None,
    gate: Optional[PaymentGate] = None,
) -> FastAPI:
    """Builds the FastAPI application."""
    if news_tools is None:
        news_tools = NewsTools(
            build_provider(config),
            RelevanceFilter(config.openai_api_key, model=config.openai_model),
        )
    if gate is None:
        gate = PaymentGate(config)

    tools = {tool.name: tool for tool in build_tools(config, news_tools)}
    app = FastAPI(title=SERVER_NAME, version=SERVER_VERSION)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info("Request received: %s %s", request.method, request.url)
        return await call_next(request)

    @app.get("/health")
    async def health() -> Dict[str, str]:
        return {"status": "ok"}

    async def call_tool(request: Request, params: Dict[str, Any]) -> Dict[str, Any]:
        name = params.get("name")
        tool = tools.get(name) if isinstance(name, str) else None
        if tool is None:
            raise RPCError(INVALID_PARAMS, f"Unknown tool: {name}")

        if not tool.price:
            return tool_result(await run_in_threadpool(tool.handler))

        try:
            accepts = gate.requirements(str(request.url), tool.price, tool.description)
            if not accepts:
                raise ConfigurationError("No payment recipient configured")
            payment = _payment_from(request, params)
            if payment is None:
                raise PaymentError("Payment required")
            requirement = await run_in_threadpool(gate.verify, payment, accepts)
        except PaymentError as e:
            raise RPCError(
                PAYMENT_REQUIRED,
                "Payment required",
                {"x402Version": X402_VERSION, "error": str(e), "accepts": accepts},
            ) from e
        except BizNewsError as e:
            logger.error("Payment gate misconfigured: %s", e)
            raise RPCError(INTERNAL_ERROR, str(e)) from e

        result = tool_result(await run_in_threadpool(tool.handler))
        try:
            settlement = await run_in_threadpool(gate.settle, payment, requirement)
            result["_meta"] = {"x402/payment-response": settlement}
        except BizNewsError as e:
            logger.error("Settlement failed for %s: %s", tool.name, e)
        return result

    async def dispatch(request: Request, method: str, params: Dict[str, Any]) -> Any:
        if method == "initialize":
            return {
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {"tools": {}},
                "serverInfo": {"name": SERVER_NAME, "version": SERVER_VERSION},
            }
        if method == "ping":
            return {}
        if method == "tools/list":
            return {"tools": [tool.describe() for tool in tools.values()]}
        if method == "tools/call":
            return await call_tool(request, params)
        raise RPCError(METHOD_NOT_FOUND, f"Method not found: {method}")

    @app.post("/mcp")
    async def mcp(request: Request) -> Response:
        try:
            body = await request.json()
        except ValueError:
            return JSONResponse(
                {
                    "jsonrpc": "2.0",
                    "id": None,
                    "error": {"code": PARSE_ERROR, "message": "Parse error"},
                }
            )

        if not isinstance(body, dict) or not isinstance(body.get("method"), str):
            return JSONResponse(
                {
                    "jsonrpc": "2.0",
                    "id": body.get("id") if isinstance(body, dict) else None,
                    "error": {"code": INVALID_REQUEST, "message": "Invalid request"},
                }
            )

        method = body["method"]
        if "id" not in body or method.startswith("notifications/"):
            logger.debug("Notification %s", method)
            return Response(status_code=202)

        params = body.get("params") or {}
        try:
            if not isinstance(params, dict):
                raise RPCError(INVALID_PARAMS, "params must be an object")
            result = await dispatch(request, method, params)
        except RPCError as e:
            return JSONResponse({"jsonrpc": "2.0", "id": body["id"], "error": e.to_dict()})
        return JSONResponse({"jsonrpc": "2.0", "id": body["id"], "result": result})

    return app
