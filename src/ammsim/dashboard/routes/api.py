"""JSON API for the metrics feed and simulation controls."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ammsim.config import RuntimeConfig
from ammsim.exceptions import SimulationError
from ammsim.models import SwapDirection, TradeIntent
from ammsim.simulation import Simulation

log = structlog.get_logger(__name__)

router = APIRouter()


class ConfigUpdate(BaseModel):
    """Runtime overrides; omitted fields are left unchanged."""

    speed: int | None = None
    volatility: str | None = None


class ManualTrade(BaseModel):
    """A trade injected by hand instead of generated."""

    direction: SwapDirection
    quantity_in: str


def _simulation(request: Request) -> Simulation:
    return request.app.state.simulation


@router.get("/metrics")
async def get_metrics(request: Request, humanize: bool = False) -> JSONResponse:
    """Latest sampled snapshot, or a fresh one before the first sampler tick."""
    simulation = _simulation(request)
    snapshot = simulation.latest_snapshot or simulation.snapshot()
    return JSONResponse(content=snapshot.to_dict(humanize=humanize))


@router.get("/status")
async def get_status(request: Request) -> JSONResponse:
    return JSONResponse(content=_simulation(request).get_status())


@router.get("/history")
async def get_history(request: Request) -> JSONResponse:
    """Trailing daily volume and fee windows, oldest first."""
    return JSONResponse(content=_simulation(request).get_history())


@router.post("/control/pause")
async def pause(request: Request) -> JSONResponse:
    simulation = _simulation(request)
    simulation.pause()
    return JSONResponse(content=simulation.get_status())


@router.post("/control/resume")
async def resume(request: Request) -> JSONResponse:
    simulation = _simulation(request)
    try:
        simulation.resume()
    except SimulationError as e:
        return JSONResponse(status_code=409, content={"error": str(e)})
    return JSONResponse(content=simulation.get_status())


@router.post("/control/config")
async def update_config(request: Request, update: ConfigUpdate) -> JSONResponse:
    """Change speed and/or volatility without restarting."""
    simulation = _simulation(request)

    try:
        rc = RuntimeConfig(speed=update.speed)
        if update.volatility is not None and update.volatility.strip():
            rc.volatility = Decimal(update.volatility.strip())
        simulation.apply_runtime_config(rc)
    except (InvalidOperation, ValueError, SimulationError) as e:
        log.error("config_update_validation_error", error=str(e))
        return JSONResponse(status_code=400, content={"error": f"Invalid value: {e}"})

    log.info("config_updated_via_api", config=str(rc))
    return JSONResponse(content=simulation.get_status())


@router.post("/trades")
async def inject_trade(request: Request, trade: ManualTrade) -> JSONResponse:
    """Apply one hand-specified trade through the same path as generated ones."""
    simulation = _simulation(request)
    if simulation.is_aborted:
        return JSONResponse(
            status_code=409, content={"error": f"Simulation was aborted: {simulation.error}"}
        )

    try:
        quantity = Decimal(trade.quantity_in.strip())
    except InvalidOperation:
        return JSONResponse(status_code=400, content={"error": "quantity_in is not a number"})
    if not quantity.is_finite() or quantity <= 0:
        return JSONResponse(status_code=400, content={"error": "quantity_in must be positive"})

    try:
        record = simulation.step(TradeIntent(direction=trade.direction, quantity_in=quantity))
    except SimulationError as e:
        await simulation.abort(e)
        return JSONResponse(status_code=500, content={"error": str(e)})

    log.info("manual_trade_applied", **record.to_dict())
    return JSONResponse(content=record.to_dict())
