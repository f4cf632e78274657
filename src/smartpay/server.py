"""
SmartPay API Server
Exposes checkout quoting and route execution via REST API for frontend integration.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from dotenv import load_dotenv

# Load environment variables (SMARTPAY_*)
load_dotenv()

from smartpay import __version__
from smartpay.catalog import NETWORKS, SUPPORTED_METHODS, TOKENS
from smartpay.config import settings
from smartpay.schema import SmartPayInputError
from smartpay.sdk import SmartPaySDK
from smartpay.wallet import create_demo_wallet

# Configure Logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# CORS origins
origins = [
    "http://localhost:5173",  # Vite dev server
    "http://127.0.0.1:5173",
]


# Data Models
class QuoteRequest(BaseModel):
    checkout: Dict[str, Any]
    wallet: Optional[Dict[str, Any]] = None  # demo wallet when omitted
    amount_input: Optional[float] = None
    strategy: str = settings.default_strategy


class ExecuteRequest(BaseModel):
    route: Optional[Dict[str, Any]] = None
    wallet: Optional[Dict[str, Any]] = None  # demo wallet when omitted
    to_address: Optional[str] = None
    force_execution: bool = False


def input_error(e: SmartPayInputError) -> HTTPException:
    logger.warning(f"Rejected input: {e.message}")
    return HTTPException(status_code=400, detail={"message": e.message, "errors": e.errors})


def create_app(sdk: Optional[SmartPaySDK] = None) -> FastAPI:
    """
    Build the API around an SDK instance.

    Transports cannot travel over JSON, so /execute dispatches through the
    SDK's transport resolver when one is configured and simulates otherwise.
    """
    sdk = sdk or SmartPaySDK()

    app = FastAPI(title="SmartPay API", version=__version__)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.sdk = sdk

    @app.get("/")
    async def root():
        return {"status": "online", "system": "SmartPay"}

    @app.get("/catalog")
    async def catalog():
        """Tokens, networks and accepted payment methods."""
        return {
            "tokens": {key: token.model_dump() for key, token in TOKENS.items()},
            "networks": {key: network.model_dump() for key, network in NETWORKS.items()},
            "supported_methods": list(SUPPORTED_METHODS),
        }

    @app.post("/quote")
    async def quote(req: QuoteRequest):
        """Quote a checkout under every strategy."""
        logger.info(f"Quote requested for checkout {req.checkout.get('id')} ({req.strategy})")
        try:
            result = await sdk.quote(
                req.checkout,
                req.wallet if req.wallet is not None else create_demo_wallet(),
                amount_input=req.amount_input,
                strategy=req.strategy,
            )
        except SmartPayInputError as e:
            raise input_error(e)
        return result.model_dump(mode="json")

    @app.post("/quote/{strategy}")
    async def quote_by_strategy(strategy: str, req: QuoteRequest):
        """Ranked routes for one strategy."""
        try:
            routes = await sdk.quote_by_strategy(
                req.checkout,
                req.wallet if req.wallet is not None else create_demo_wallet(),
                strategy=strategy,
                amount_input=req.amount_input,
            )
        except SmartPayInputError as e:
            raise input_error(e)
        return {"strategy": strategy, "routes": [route.model_dump(mode="json") for route in routes]}

    @app.post("/execute")
    async def execute(req: ExecuteRequest):
        """Validate and execute a route. Failures are 200 responses with ok=false."""
        try:
            result = await sdk.execute(
                req.route,
                req.wallet if req.wallet is not None else create_demo_wallet(),
                to_address=req.to_address,
                force_execution=req.force_execution,
            )
        except SmartPayInputError as e:
            raise input_error(e)

        logger.info(f"Execution {result.route_id}: {result.status.value}")
        return result.model_dump(mode="json")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
