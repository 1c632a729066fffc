import os
import time
import uuid
from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from solders.pubkey import Pubkey
from core.actions import ACTION_HEADERS, ACTIONS_JSON_HEADERS, build_action_descriptor, build_actions_json
from core.config import setting
from core.errors import InvalidSenderAddress, TipError
from core.solana_client import SolanaRpcClient
from core.utils import (
    build_transfer_transaction,
    format_amount,
    parse_amount,
    parse_sender_address,
    serialize_unsigned,
    to_lamports,
)
from schema import ActionPostRequest, ActionPostResponse


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.rpc_client = SolanaRpcClient(setting.rpc_url, timeout=setting.rpc_timeout)
    logger.info(f"Using Solana RPC {setting.rpc_url}, tips go to {setting.recipient_address}")
    yield
    await app.state.rpc_client.close()
    app.state.rpc_client = None


def get_rpc_client(request: Request) -> SolanaRpcClient:
    """
    Get the RPC client owned by the app.

    The lifespan hook creates and closes it. When the app is driven without
    lifespan events the client is created here on first use, and whoever drives
    the app owns closing it with ``await app.state.rpc_client.close()``.
    """
    if getattr(request.app.state, "rpc_client", None) is None:
        request.app.state.rpc_client = SolanaRpcClient(setting.rpc_url, timeout=setting.rpc_timeout)
    return request.app.state.rpc_client


def get_recipient() -> Pubkey:
    return Pubkey.from_string(setting.recipient_address)


# Rate limiter setup
limiter = Limiter(key_func=get_remote_address)

# Initialize FastAPI app
app = FastAPI(
    title="Solana Tip Jar Action",
    description="Builds unsigned SOL tip transactions for Solana Actions clients",
    version="1.0.0",
    lifespan=lifespan,
)

# Add rate limiter
app.state.limiter = limiter


@app.exception_handler(TipError)
async def tip_error_handler(request: Request, exc: TipError):
    return JSONResponse({"message": exc.message}, status_code=exc.status_code, headers=ACTION_HEADERS)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    logger.warning(f"Rate limit exceeded on {request.url.path}: {exc.detail}")
    return JSONResponse(
        {"message": f"Rate limit exceeded: {exc.detail}"},
        status_code=429,
        headers=ACTION_HEADERS,
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # The only request body is the POST {"account": ...}
    logger.warning(f"Rejected request body on {request.url.path}: {exc.errors()}")
    return await tip_error_handler(request, InvalidSenderAddress())


# Middleware for request validation and logging
@app.middleware("http")
async def validate_request(request: Request, call_next):
    # Record request time for monitoring
    start_time = time.time()
    request_id = str(uuid.uuid4())

    # Add request_id to request state for logging
    request.state.request_id = request_id

    # Log the incoming request
    client_host = request.client.host if request.client else "unknown"
    logger.info(f"Request {request_id}: {request.method} {request.url.path} from {client_host}")

    # Process the request
    try:
        response = await call_next(request)

        # Log response details
        process_time = time.time() - start_time
        status_code = response.status_code
        logger.info(
            f"Response {request_id}: Status {status_code}, "
            f"Completed in {process_time:.3f}s"
        )

        # Add request ID to response headers for tracing
        response.headers["X-Request-ID"] = request_id

        return response
    except Exception as e:
        # Log any unhandled exceptions
        process_time = time.time() - start_time
        logger.error(
            f"Error {request_id}: {str(e)}, "
            f"Occurred after {process_time:.3f}s"
        )
        raise


# API endpoints
@app.get("/actions.json")
async def actions_json():
    """Map the tip page to its action API for action resolvers"""
    return JSONResponse(build_actions_json().model_dump(), headers=ACTIONS_JSON_HEADERS)


@app.options("/actions.json")
async def actions_json_preflight():
    return JSONResponse({}, headers=ACTIONS_JSON_HEADERS)


@app.get("/api/tip")
async def describe_tip():
    """Return the action metadata shown to the user before choosing an amount"""
    descriptor = build_action_descriptor(setting)
    return JSONResponse(descriptor.model_dump(exclude_none=True), headers=ACTION_HEADERS)


@app.post("/api/tip", response_model=ActionPostResponse)
@limiter.limit(setting.rate_limit)  # Rate limiting
async def create_tip_transaction(
    tip: ActionPostRequest,
    request: Request,
    amount: str | None = None,
    rpc_client: SolanaRpcClient = Depends(get_rpc_client),
    recipient: Pubkey = Depends(get_recipient),
):
    """Build an unsigned transfer of the requested amount to the tip jar"""
    request_id = getattr(request.state, "request_id", str(uuid.uuid4()))

    try:
        sender = parse_sender_address(tip.account)
        sol_amount = parse_amount(amount)
        lamports = to_lamports(sol_amount)
        logger.info(f"Building tip {request_id}: {sol_amount} SOL ({lamports} lamports) from {sender} to {recipient}")

        blockhash = await rpc_client.get_latest_blockhash()
        transaction = build_transfer_transaction(sender, recipient, lamports, blockhash)
        encoded = serialize_unsigned(transaction)
    except TipError as exc:
        logger.warning(f"Rejected tip {request_id}: {exc.message}")
        raise
    except Exception as exc:
        logger.exception(f"Unhandled exception building tip {request_id}: {exc}")
        raise TipError() from exc

    response = ActionPostResponse(
        transaction=encoded,
        message=setting.thank_you_message.format(amount=format_amount(sol_amount)),
    )
    return JSONResponse(response.model_dump(), headers=ACTION_HEADERS)


@app.options("/api/tip")
async def tip_preflight():
    return JSONResponse({}, headers=ACTION_HEADERS)


if __name__ == "__main__":
    # Launch the FastAPI app
    import uvicorn
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("app:app", host="0.0.0.0", port=port, reload=False)
