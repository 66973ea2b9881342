from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, load_settings
from .errors import MotorMindError, UnitNotFound
from .gemini_client import GeminiClient
from .inventory_store import InventoryStore, load_seed_records
from .models import AgentRequest, BuyRequest, VehicleCreate, VehicleUpdate
from .resolution import Oracle, ResolutionOrchestrator
from .stock_ledger import StockLedger

BASE_DIR = Path(__file__).resolve().parent
ENV_PATH = BASE_DIR / ".env"

logger = logging.getLogger("motormind.api")


def configure_logging(level_name: str) -> None:
    # Configure the root logger once; keep the motormind hierarchy at the chosen level.
    log_level = getattr(logging, level_name.upper(), logging.INFO)
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=log_level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
    logging.getLogger("motormind").setLevel(log_level)


def create_app(
    settings: Optional[Settings] = None,
    oracle: Optional[Oracle] = None,
    store: Optional[InventoryStore] = None,
) -> FastAPI:
    """Purpose: Build the FastAPI application with its collaborators wired in.
    Inputs/Outputs: Optional Settings, Oracle and InventoryStore overrides; returns the app.
    Side Effects / State: Loads .env, configures logging, may seed an empty store.
    Dependencies: GeminiClient (default oracle), InventoryStore, ResolutionOrchestrator.
    Failure Modes: Missing GEMINI_API_KEY raises ValueError when no oracle is injected.
    If Removed: There is no HTTP surface; run with `uvicorn motormind.app:create_app --factory`.
    Testing Notes: Inject a scripted oracle and InventoryStore(None) for tests.
    """
    # Resolve configuration and collaborators, then register routes.
    if ENV_PATH.exists():
        load_dotenv(ENV_PATH, override=True)
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    if store is None:
        store = InventoryStore(settings.inventory_path)
        if settings.seed_on_startup and len(store) == 0 and settings.seed_path.exists():
            store.seed(load_seed_records(settings.seed_path))
    if oracle is None:
        oracle = GeminiClient(settings)

    orchestrator = ResolutionOrchestrator(oracle=oracle, store=store, prompts_dir=settings.prompts_dir)
    ledger = StockLedger(store)

    app = FastAPI(title="MotorMind Vehicle Management API", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.store = store
    app.state.orchestrator = orchestrator
    app.state.ledger = ledger

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc), "success": False})

    @app.exception_handler(MotorMindError)
    async def handle_motormind_error(request: Request, exc: MotorMindError) -> JSONResponse:
        logger.warning("request failed path=%s error=%s", request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message, "success": False})

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled error path=%s", request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error", "success": False})

    @app.get("/")
    def welcome() -> dict:
        return {"message": "Welcome to MotorMind"}

    router = APIRouter(prefix="/api")

    @router.get("/vehicles")
    def list_vehicles() -> List[dict]:
        return [item.to_dict() for item in store.list_all()]

    @router.post("/vehicles")
    def create_vehicle(body: VehicleCreate) -> dict:
        vehicle = store.create(
            model=body.model,
            location=body.location,
            stock=body.stock,
            price=body.price,
            color=body.color,
            type=body.type.value,
        )
        return {"vehicle": vehicle.to_dict(), "success": True}

    @router.get("/vehicles/{vehicle_id}")
    def get_vehicle(vehicle_id: str) -> dict:
        vehicle = store.get(vehicle_id)
        if vehicle is None:
            raise UnitNotFound(vehicle_id)
        return {"vehicle": vehicle.to_dict(), "success": True}

    @router.post("/vehicles/{vehicle_id}")
    def update_vehicle(vehicle_id: str, body: VehicleUpdate) -> dict:
        vehicle = store.update(
            vehicle_id,
            model=body.model,
            location=body.location,
            stock=body.stock,
            price=body.price,
            color=body.color,
        )
        return {"vehicle": vehicle.to_dict(), "success": True}

    @router.delete("/vehicles/{vehicle_id}")
    @router.get("/delete/vehicles/{vehicle_id}")
    def delete_vehicle(vehicle_id: str) -> dict:
        vehicle = store.delete(vehicle_id)
        return {"vehicle": vehicle.to_dict(), "success": True}

    @router.post("/agent")
    def resolve_message(body: AgentRequest) -> dict:
        result = orchestrator.resolve(body.message)
        return {"data": result.to_dict(), "success": True}

    @router.post("/buy")
    def buy_vehicle(body: BuyRequest) -> dict:
        vehicle = ledger.decrement(body.id)
        return {"vehicle": vehicle.to_dict(), "success": True}

    app.include_router(router)
    return app
