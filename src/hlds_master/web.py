"""Read-only HTTP status page for the server registry.

The page only consumes ``ServerRegistry.snapshot()``; nothing in the core
depends on this module.
"""

import logging
from html import escape

from aiohttp import web

from hlds_master.protocol.models import ServerRecord
from hlds_master.registry import ServerRegistry

logger = logging.getLogger(__name__)

REGISTRY_KEY = web.AppKey("registry", ServerRegistry)

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <title>Game Server List</title>
    <link href="https://cdn.jsdelivr.net/npm/bootstrap@5.3.0/dist/css/bootstrap.min.css" rel="stylesheet">
    <style>body {{ padding: 20px; background-color: #f8f9fa; }} .table {{ background: white; }}</style>
</head>
<body>
    <div class="container">
        <h2 class="mb-4">Online Game Servers</h2>
        <div class="alert alert-info">Servers online: {count}</div>
        <table class="table table-striped table-hover border">
            <thead class="table-dark">
                <tr>
                    <th>Name</th>
                    <th>Address (IP:Port)</th>
                    <th>Map</th>
                    <th>Players</th>
                    <th>Last Seen</th>
                </tr>
            </thead>
            <tbody>
{rows}
            </tbody>
        </table>
        <div class="text-muted small">Refreshing automatically...</div>
    </div>
    <script>setTimeout(function(){{ location.reload(); }}, {refresh_ms});</script>
</body>
</html>
"""

ROW_TEMPLATE = """                <tr>
                    <td>{name}</td>
                    <td>{address}</td>
                    <td>{map}</td>
                    <td>{players}/{max_players}</td>
                    <td>{last_seen}</td>
                </tr>"""


def render_row(record: ServerRecord) -> str:
    """Render one table row, escaping server-supplied strings."""
    return ROW_TEMPLATE.format(
        name=escape(record.name),
        address=escape(record.address),
        map=escape(record.map),
        players=record.players,
        max_players=record.max_players,
        last_seen=record.last_seen.astimezone().strftime("%H:%M:%S"),
    )


def render_page(records: list[ServerRecord], refresh_ms: int = 10_000) -> str:
    """Render the full status page for a snapshot."""
    rows = "\n".join(render_row(record) for record in records)
    return PAGE_TEMPLATE.format(count=len(records), rows=rows, refresh_ms=refresh_ms)


async def handle_index(request: web.Request) -> web.Response:
    """Serve the HTML server list."""
    records = request.app[REGISTRY_KEY].snapshot()
    return web.Response(text=render_page(records), content_type="text/html")


async def handle_servers_json(request: web.Request) -> web.Response:
    """Serve the server list as JSON."""
    records = request.app[REGISTRY_KEY].snapshot()
    return web.json_response(
        {
            "count": len(records),
            "servers": [record.to_dict() for record in records],
        }
    )


def create_app(registry: ServerRegistry) -> web.Application:
    """Build the status page application for a registry."""
    app = web.Application()
    app[REGISTRY_KEY] = registry
    app.add_routes(
        [
            web.get("/", handle_index),
            web.get("/servers.json", handle_servers_json),
        ]
    )
    return app


class StatusPage:
    """Runs the status page application on a TCP site."""

    def __init__(
        self,
        registry: ServerRegistry,
        host: str = "0.0.0.0",  # noqa: S104
        port: int = 8080,
    ) -> None:
        """Initialize status page.

        Args:
            registry: Registry to render
            host: Interface to bind
            port: HTTP port

        """
        self._app = create_app(registry)
        self._host = host
        self._port = port
        self._runner: web.AppRunner | None = None

    async def start(self) -> None:
        """Start serving HTTP.

        Raises:
            OSError: If the port cannot be bound

        """
        if self._runner is not None:
            return
        runner = web.AppRunner(self._app, access_log=None)
        await runner.setup()
        site = web.TCPSite(runner, self._host, self._port)
        try:
            await site.start()
        except OSError:
            await runner.cleanup()
            raise
        self._runner = runner
        logger.info("Web server started on %s:%d", self._host, self._port)

    async def stop(self) -> None:
        """Stop serving HTTP."""
        if self._runner is None:
            return
        await self._runner.cleanup()
        self._runner = None
        logger.info("Web server stopped")

    @property
    def app(self) -> web.Application:
        """The aiohttp application."""
        return self._app
