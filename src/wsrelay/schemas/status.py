"""Pydantic schemas for the status and index endpoints."""

from typing import Optional

from pydantic import BaseModel


# ─── Time ─────────────────────────────────────────────────


class TimestampRead(BaseModel):
    iso: str
    local: str
    compact: str
    unix: int

    model_config = {"from_attributes": True}


class TimezoneRead(BaseModel):
    timezone: str
    offset: int
    offset_string: str
    local_time: str
    utc_time: str
    error: Optional[str] = None

    model_config = {"from_attributes": True}


class UptimeRead(BaseModel):
    total_milliseconds: int
    total_seconds: int
    days: int
    hours: int
    minutes: int
    seconds: int
    formatted: str
    human_readable: str

    model_config = {"from_attributes": True}


class TimeRead(BaseModel):
    start: TimestampRead
    current: TimestampRead
    timezone: TimezoneRead


# ─── Services ─────────────────────────────────────────────


class WebSocketServiceRead(BaseModel):
    port: int
    connected_clients: int
    status: str = "running"


class HttpServiceRead(BaseModel):
    port: int
    status: str = "running"


class ServicesRead(BaseModel):
    websocket: WebSocketServiceRead
    http: HttpServiceRead


class SystemRead(BaseModel):
    pid: int
    platform: str
    python_version: str


class StatusRead(BaseModel):
    status: str = "running"
    time: TimeRead
    uptime: UptimeRead
    services: ServicesRead
    system: SystemRead
    version: str


class IndexRead(BaseModel):
    message: str
    version: str
    endpoints: dict[str, str]
    websocket_url: str
