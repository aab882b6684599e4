"""wsrelay CLI — run the relay, push messages, inspect status.

Usage:
    wsrelay serve                                # HTTP on 3000, realtime on 9999
    wsrelay serve --http-port 8080 --ws-port 8081
    wsrelay send '{"msg": "hi"}'                 # Broadcast a JSON payload
    wsrelay send "plain text"                    # Sent as {"message": "plain text"}
    wsrelay status                               # Uptime, clients, timezone
    wsrelay timezones                            # Common timezones + offsets
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from typing import Optional

import click
import httpx

from wsrelay import __version__
from wsrelay.realtime.clock import COMMON_TIMEZONES, timezone_info

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:3000"


def _api_url(override: Optional[str] = None) -> str:
    return (override or os.environ.get("WSRELAY_API_URL", DEFAULT_API_URL)).rstrip("/")


def _client(api_url: Optional[str] = None) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the relay's HTTP listener."""
    return httpx.AsyncClient(base_url=_api_url(api_url), timeout=10.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from a synchronous click handler.

    Offloads to a thread when a loop is already running (e.g. CliRunner
    inside an async test).
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _pretty_json(data: dict | list) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def _parse_payload(raw: str):
    """JSON if it parses, otherwise wrap the text as {"message": ...}."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return {"message": raw}


def _fail(message: str) -> None:
    click.secho(f"Error: {message}", fg="red", err=True)
    sys.exit(1)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="wsrelay")
def main():
    """wsrelay — relay HTTP submissions to WebSocket subscribers."""


# ---------------------------------------------------------------------------
# wsrelay serve
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", help="Bind address for both listeners")
@click.option("--http-port", type=click.IntRange(1, 65535), help="HTTP API port")
@click.option("--ws-port", type=click.IntRange(1, 65535), help="Realtime listener port")
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False))
def serve(host: Optional[str], http_port: Optional[int], ws_port: Optional[int],
          log_level: Optional[str]):
    """Run the HTTP API and the realtime listener in one process."""
    from wsrelay.config import settings
    from wsrelay.logs import setup_logging

    overrides = {
        "host": host,
        "http_port": http_port,
        "ws_port": ws_port,
        "log_level": log_level.upper() if log_level else None,
    }
    config = settings.model_copy(update={k: v for k, v in overrides.items() if v is not None})
    setup_logging(config.log_level, json=config.log_json)
    asyncio.run(_serve(config))


async def _serve(config) -> None:
    import uvicorn

    from wsrelay.main import create_app, create_ws_app
    from wsrelay.realtime.hub import RelayHub

    hub = RelayHub(config)
    http_server = uvicorn.Server(uvicorn.Config(
        create_app(hub),
        host=config.host,
        port=config.http_port,
        log_config=None,
    ))
    # Lifespan runs on the HTTP app only, so the hub shuts down once
    ws_server = uvicorn.Server(uvicorn.Config(
        create_ws_app(hub),
        host=config.host,
        port=config.ws_port,
        log_config=None,
        lifespan="off",
    ))
    await asyncio.gather(http_server.serve(), ws_server.serve())


# ---------------------------------------------------------------------------
# wsrelay send
# ---------------------------------------------------------------------------


@main.command()
@click.argument("payload")
@click.option("--api-url", help="Relay HTTP URL (or set WSRELAY_API_URL)")
def send(payload: str, api_url: Optional[str]):
    """Broadcast PAYLOAD to every connected subscriber."""
    _run(_send_impl(_parse_payload(payload), api_url))


async def _send_impl(body, api_url: Optional[str]):
    async with _client(api_url) as c:
        try:
            r = await c.post("/api/sendmsg", json=body)
        except httpx.HTTPError as e:
            _fail(f"could not reach relay at {_api_url(api_url)}: {e}")
        if r.status_code != 200:
            _fail(f"{r.status_code} {r.json().get('detail', r.text)}")
        data = r.json()
        click.secho(
            f"Sent to {data['clientCount']} client(s) at {data['localTime']}",
            fg="green",
        )


# ---------------------------------------------------------------------------
# wsrelay status
# ---------------------------------------------------------------------------


@main.command()
@click.option("--api-url", help="Relay HTTP URL (or set WSRELAY_API_URL)")
@click.option("--json", "as_json", is_flag=True, help="Print the raw status JSON")
def status(api_url: Optional[str], as_json: bool):
    """Show uptime, connected clients and timezone."""
    _run(_status_impl(api_url, as_json))


async def _status_impl(api_url: Optional[str], as_json: bool):
    async with _client(api_url) as c:
        try:
            r = await c.get("/api/status")
        except httpx.HTTPError as e:
            _fail(f"could not reach relay at {_api_url(api_url)}: {e}")
        r.raise_for_status()
        data = r.json()

    if as_json:
        click.echo(_pretty_json(data))
        return

    ws = data["services"]["websocket"]
    tz = data["time"]["timezone"]
    click.secho(f"wsrelay {data['version']}  {data['status']}", bold=True)
    click.echo(f"  Started:   {data['time']['start']['local']}")
    click.echo(f"  Now:       {data['time']['current']['local']}")
    click.echo(f"  Uptime:    {data['uptime']['human_readable']}")
    click.echo(f"  Timezone:  {tz['timezone']} {tz['offset_string']}")
    if tz.get("error"):
        click.secho(f"             {tz['error']}", fg="yellow")
    click.echo(f"  Clients:   {ws['connected_clients']} (ws port {ws['port']})")
    click.echo(f"  HTTP port: {data['services']['http']['port']}")


# ---------------------------------------------------------------------------
# wsrelay timezones
# ---------------------------------------------------------------------------


@main.command()
def timezones():
    """List common timezones with their current UTC offset."""
    for label in COMMON_TIMEZONES:
        info = timezone_info(label)
        if info.error:
            click.secho(f"  {label:22s} {info.error}", fg="yellow")
        else:
            click.echo(f"  {label:22s} {info.offset_string}  {info.local_time}")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    main()
