"""
FastAPI status API for the sentinel.

Provides REST API endpoints for:
- Health and monitoring status
- Latest chart per watchlist instrument
- The alert feed
- Manual refresh and starting/stopping the scheduled monitor
"""

import logging
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from .orchestrator import CycleOrchestrator
from .scheduler import Scheduler
from .schemas import (
    AlertModel,
    ChartDetail,
    ChartSummary,
    CycleResponse,
    StatusResponse,
    alert_model,
    chart_detail,
    chart_summary,
    cycle_response,
    instrument_model,
)

logger = logging.getLogger(__name__)

# Global instances (initialized on startup)
orchestrator: Optional[CycleOrchestrator] = None
scheduler: Optional[Scheduler] = None

app = FastAPI(
    title="P&F Sentinel",
    description="Point-and-Figure column monitoring for a watchlist",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def init_app(cycle_orchestrator: CycleOrchestrator, cycle_scheduler: Optional[Scheduler] = None) -> FastAPI:
    """Attach the orchestrator (and scheduler) the endpoints serve."""
    global orchestrator, scheduler
    orchestrator = cycle_orchestrator
    scheduler = cycle_scheduler or Scheduler(cycle_orchestrator)
    logger.info(f"Status API initialized for {len(cycle_orchestrator.config.watchlist)} instruments")
    return app


def get_orchestrator() -> CycleOrchestrator:
    if orchestrator is None:
        raise HTTPException(status_code=500, detail="Sentinel not initialized")
    return orchestrator


def get_scheduler() -> Scheduler:
    if scheduler is None:
        raise HTTPException(status_code=500, detail="Sentinel not initialized")
    return scheduler


@app.get("/api/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok", "initialized": orchestrator is not None}


def _status_response() -> StatusResponse:
    o = get_orchestrator()
    s = get_scheduler()
    chart_config = o.config.chart
    return StatusResponse(
        market_open=s.market_open(),
        monitoring=s.is_running,
        cycles_run=s.cycles_run,
        last_cycle_at=s.last_cycle_at,
        interval=chart_config.interval,
        atr_length=chart_config.atr_length,
        reversal=chart_config.reversal,
        watchlist=[instrument_model(i) for i in o.config.watchlist],
    )


@app.get("/api/status", response_model=StatusResponse)
async def status():
    return _status_response()


@app.get("/api/charts", response_model=List[ChartSummary])
async def list_charts():
    """Latest chart summary for every instrument charted so far, in watchlist order."""
    o = get_orchestrator()
    charts = o.charts
    return [
        chart_summary(i.symbol, charts[i.symbol])
        for i in o.config.watchlist
        if i.symbol in charts
    ]


@app.get("/api/charts/{symbol}", response_model=ChartDetail)
async def get_chart(symbol: str):
    o = get_orchestrator()
    chart = o.get_chart(symbol)
    if chart is None:
        raise HTTPException(status_code=404, detail=f"No chart for '{symbol}'")
    return chart_detail(symbol, chart)


@app.get("/api/alerts", response_model=List[AlertModel])
async def list_alerts(limit: int = Query(50, ge=1, le=50, description="Maximum alerts returned")):
    """Alert feed, newest first."""
    o = get_orchestrator()
    return [alert_model(r) for r in o.alert_log.entries(limit)]


@app.post("/api/cycle", response_model=CycleResponse)
def run_cycle():
    """Manual refresh: run one cycle now, ignoring market hours."""
    s = get_scheduler()
    report = s.trigger()
    if report is None:
        raise HTTPException(status_code=409, detail="A cycle is already in progress")
    return cycle_response(report)


@app.post("/api/monitor/start", response_model=StatusResponse)
def start_monitor():
    get_scheduler().start()
    return _status_response()


@app.post("/api/monitor/stop", response_model=StatusResponse)
def stop_monitor():
    get_scheduler().stop()
    return _status_response()
