"""
Pydantic models for the status API.

Request/response shapes only; conversion helpers build them from the core
dataclasses.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ..point_figure.signature import Signature
from ..point_figure.types import Chart, Column, ColumnType
from .alert_log import AlertRecord
from .config import Instrument
from .orchestrator import CycleReport, InstrumentOutcome


class InstrumentModel(BaseModel):
    """Watchlist entry."""
    symbol: str
    instrument_token: int
    exchange: str


class SignatureModel(BaseModel):
    """Column count and terminal type recorded for an instrument."""
    count: int
    type: ColumnType


class ColumnModel(BaseModel):
    """One P&F column."""
    kind: ColumnType
    boxes: List[float] = Field(description="Box levels in append order")
    high: float
    low: float


class ChartSummary(BaseModel):
    """Latest chart shape for one instrument."""
    symbol: str
    column_count: int
    terminal_type: Optional[ColumnType] = None
    box_size: float
    last_updated: datetime


class ChartDetail(ChartSummary):
    """Chart with all columns."""
    columns: List[ColumnModel]


class AlertModel(BaseModel):
    """Alert feed entry."""
    id: str
    timestamp: datetime
    symbol: str
    message: str
    type: ColumnType
    delivered: bool


class OutcomeModel(BaseModel):
    """Per-instrument result of a cycle."""
    symbol: str
    status: str
    signature: Optional[SignatureModel] = None
    notified: Optional[bool] = None
    error: Optional[str] = None


class CycleResponse(BaseModel):
    """Result of a manually triggered cycle."""
    started_at: datetime
    finished_at: Optional[datetime] = None
    changed: int
    failed: int
    outcomes: List[OutcomeModel]


class StatusResponse(BaseModel):
    """Sentinel status."""
    market_open: bool
    monitoring: bool
    cycles_run: int
    last_cycle_at: Optional[datetime] = None
    interval: str
    atr_length: int
    reversal: int
    watchlist: List[InstrumentModel]


def instrument_model(instrument: Instrument) -> InstrumentModel:
    return InstrumentModel(
        symbol=instrument.symbol,
        instrument_token=instrument.instrument_token,
        exchange=instrument.exchange,
    )


def signature_model(signature: Optional[Signature]) -> Optional[SignatureModel]:
    if signature is None:
        return None
    return SignatureModel(count=signature.count, type=signature.type)


def column_model(column: Column) -> ColumnModel:
    return ColumnModel(kind=column.kind, boxes=list(column.boxes), high=column.high, low=column.low)


def chart_summary(symbol: str, chart: Chart) -> ChartSummary:
    return ChartSummary(
        symbol=symbol,
        column_count=chart.column_count,
        terminal_type=chart.terminal_type,
        box_size=chart.box_size,
        last_updated=chart.last_updated,
    )


def chart_detail(symbol: str, chart: Chart) -> ChartDetail:
    return ChartDetail(
        **chart_summary(symbol, chart).model_dump(),
        columns=[column_model(c) for c in chart.columns],
    )


def alert_model(record: AlertRecord) -> AlertModel:
    return AlertModel(
        id=record.id,
        timestamp=record.timestamp,
        symbol=record.symbol,
        message=record.message,
        type=record.type,
        delivered=record.delivered,
    )


def outcome_model(outcome: InstrumentOutcome) -> OutcomeModel:
    return OutcomeModel(
        symbol=outcome.symbol,
        status=outcome.status.value,
        signature=signature_model(outcome.signature),
        notified=outcome.notified,
        error=outcome.error,
    )


def cycle_response(report: CycleReport) -> CycleResponse:
    return CycleResponse(
        started_at=report.started_at,
        finished_at=report.finished_at,
        changed=len(report.events),
        failed=len(report.failures),
        outcomes=[outcome_model(o) for o in report.outcomes],
    )
