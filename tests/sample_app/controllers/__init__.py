from __future__ import annotations

from aiohttp import web


class HomeController:
    async def getWelcome(self, request: web.Request) -> web.Response:
        return web.Response(text="welcome")
