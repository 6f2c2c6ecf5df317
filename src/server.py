import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from contracts.sample_set import SampleSet, SweepResult
from config.logging_config import setup_logging
from core.sweep_daemon import SweepDaemon

setup_logging()
logger = logging.getLogger(__name__)


def create_app(daemon: SweepDaemon) -> FastAPI:
    """
    Build the reporting app. Its lifespan starts and stops the sweep loop.
    """

    @asynccontextmanager
    async def lifespan(app):
        await daemon.start()
        yield
        await daemon.stop()

    app = FastAPI(lifespan=lifespan)

    @app.get("/healthz")
    async def healthz():
        pool = daemon.result_pool
        return {
            "status": "ok",
            "targets": len(daemon.targets),
            "sweeps_completed": pool.sweeps_completed,
            "last_sweep_at": pool.last_sweep_at,
        }

    @app.get("/results")
    async def list_results():
        snapshot = await daemon.result_pool.snapshot()
        return {name: entry.model_dump(mode="json") for name, entry in snapshot.items()}

    @app.get("/results/{name}", response_model=SampleSet)
    async def get_result(name: str):
        entry = await daemon.result_pool.get_latest(name)
        if entry is None:
            raise HTTPException(status_code=404, detail=f"No results for target '{name}'")
        return entry

    @app.post("/sweep", response_model=SweepResult)
    async def run_sweep():
        logger.info("Sweep requested over HTTP")
        return await daemon.run_once()

    @app.get("/metrics")
    def metrics():
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app
