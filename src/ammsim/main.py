"""Entry point for the AMM order-flow simulator.

Wires all components together, optionally embeds the FastAPI metrics
feed, and starts the simulation. When the feed is enabled (default),
the simulation and the server share a single asyncio event loop via
uvicorn's programmatic API and FastAPI's lifespan context manager.

Handles SIGINT/SIGTERM for graceful shutdown.

Component wiring order (in build_components):
1. Pool (from the configured factory)
2. TickOracle (tick/price conversions)
3. Random source (seeded when SIM_SEED is set)
4. CorridorModel (corridor and pivot walk around the opening tick)
5. DayCycleAggregator (day cycle and rolling windows)
6. TradeGenerator (corridor-bounded trades)
7. Simulation (pacing and sampling loops)
"""

import asyncio
import random
import signal
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI

from ammsim.aggregator.day_cycle import DayCycleAggregator
from ammsim.config import AppSettings
from ammsim.exceptions import SimulationError
from ammsim.generator.corridor import CorridorModel
from ammsim.generator.trade import TradeGenerator
from ammsim.logging import get_logger, setup_logging
from ammsim.pool.base import Pool
from ammsim.pool.factory import create_pool
from ammsim.pool.oracle import TickOracle
from ammsim.simulation import Publisher, Simulation


def build_components(
    settings: AppSettings,
    pool: Pool | None = None,
    publish: Publisher | None = None,
) -> dict[str, Any]:
    """Build all simulator components from settings.

    Args:
        settings: Application-wide settings.
        pool: Pre-built pool; resolved from ``settings.pool.factory`` when omitted.
        publish: Optional snapshot publisher for the sampler.

    Returns:
        Dict mapping component names to instances.
    """
    logger = get_logger("ammsim.main")

    # 1. Pool
    if pool is None:
        pool = create_pool(settings.pool)

    # 2. Oracle
    oracle = TickOracle()

    # 3. Random source shared by every stochastic component
    rng = random.Random(settings.simulation.seed)

    # 4. Corridor model, reverting toward the tick the pool opened at
    market_tick = pool.cur_tick
    corridor_model = CorridorModel(settings.day_cycle, oracle, rng, market_tick)

    # 5. Aggregator
    aggregator = DayCycleAggregator(settings.day_cycle, corridor_model, initial_pivot=market_tick)

    # 6. Trade generator
    generator = TradeGenerator(settings.tradegen, rng)

    # 7. Simulation
    simulation = Simulation(
        settings=settings,
        pool=pool,
        oracle=oracle,
        generator=generator,
        aggregator=aggregator,
        publish=publish,
    )

    corridor = aggregator.corridor()
    logger.info(
        "components_built",
        market_tick=market_tick,
        corridor_left=corridor.left_tick,
        corridor_right=corridor.right_tick,
        target_quote_volume=str(aggregator.state.target_quote_volume),
        seed=settings.simulation.seed,
    )

    return {
        "pool": pool,
        "oracle": oracle,
        "rng": rng,
        "corridor_model": corridor_model,
        "aggregator": aggregator,
        "generator": generator,
        "simulation": simulation,
    }


def _setup_signal_handlers(simulation: Simulation) -> None:
    """Register SIGINT/SIGTERM to stop the simulation gracefully.

    Must be called after the asyncio event loop is running.
    """
    logger = get_logger("ammsim.main")
    loop = asyncio.get_running_loop()

    def _graceful_handler() -> None:
        logger.info("graceful_shutdown_signal")
        asyncio.create_task(simulation.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _graceful_handler)


async def _exit_server_on_abort(simulation: Simulation, server: uvicorn.Server) -> None:
    """Ask uvicorn to shut down once the simulation stops on a fatal error."""
    try:
        await simulation.wait()
    except SimulationError:
        get_logger("ammsim.main").critical("shutting_down_after_abort")
        server.should_exit = True


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the simulation with the server and stop it on shutdown.

    When ``app.state.server`` is set, a fatal simulation error also stops
    the server so the process does not keep serving a corrupted pool.
    """
    logger = get_logger("ammsim.main")
    simulation: Simulation = app.state.simulation
    server: uvicorn.Server | None = getattr(app.state, "server", None)

    await simulation.start()
    watcher = None
    if server is not None:
        watcher = asyncio.create_task(_exit_server_on_abort(simulation, server))
    logger.info("lifespan_started")

    yield

    await simulation.stop()
    if watcher is not None:
        watcher.cancel()
    logger.info("ammsim_stopped")


async def run() -> None:
    """Run the simulator.

    When the feed is enabled (DASHBOARD_ENABLED=true, the default) the
    simulation runs inside the FastAPI lifespan behind uvicorn. Otherwise
    it runs until a signal stops it or a fatal error aborts it.
    """
    # Load settings and set up logging
    settings = AppSettings()
    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("ammsim.main")

    if settings.dashboard.enabled:
        from ammsim.dashboard.app import create_dashboard_app
        from ammsim.dashboard.routes.ws import MetricsHub

        hub = MetricsHub()
        components = build_components(settings, publish=hub.publish)

        app = create_dashboard_app(lifespan=lifespan, hub=hub)
        app.state.simulation = components["simulation"]

        logger.info(
            "starting_with_dashboard",
            host=settings.dashboard.host,
            port=settings.dashboard.port,
            speed=settings.simulation.speed,
        )

        config = uvicorn.Config(
            app,
            host=settings.dashboard.host,
            port=settings.dashboard.port,
            log_level="warning",  # Suppress uvicorn access logs
        )
        server = uvicorn.Server(config)
        app.state.server = server
        await server.serve()

        error = components["simulation"].error
        if error is not None:
            raise error
    else:
        components = build_components(settings)
        simulation: Simulation = components["simulation"]

        logger.info(
            "starting_without_dashboard",
            speed=settings.simulation.speed,
            volatility=str(settings.day_cycle.volatility),
        )

        _setup_signal_handlers(simulation)
        await simulation.start()
        try:
            await simulation.wait()
        finally:
            await simulation.stop()
            logger.info("ammsim_stopped")


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
