from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import parse_qsl

from aiohttp import web

from models.config import BrowserConfig
from runtime.browser import Browser, BrowseQuery, BrowseResult
from runtime.download import Download
from runtime.errors import DownloadError
from runtime.policy import AccessPolicy
from webui.render import render_page

logger = logging.getLogger(__name__)

STATIC_FOLDERS = ("js", "css", "img")


def _parse_fields(raw: str) -> List[Tuple[str, str]]:
    return parse_qsl(raw, keep_blank_values=True, encoding="utf-8", errors="surrogateescape")


class DirectoryBrowserApp:
    """HTTP front end for browsing and downloading.

    The configuration and compiled policy are fixed at construction; every
    request only reads them.
    """

    def __init__(
        self,
        config: BrowserConfig,
        policy: Optional[AccessPolicy] = None,
        *,
        host: Optional[str] = None,
        port: Optional[int] = None,
    ) -> None:
        self.config = config
        self.browser = Browser(config, policy)
        self.host = host if host is not None else config.address
        self.port = port if port is not None else config.port
        self._app = web.Application(middlewares=[self._deadline])
        self._runner: web.AppRunner | None = None
        self._site: web.BaseSite | None = None
        self._build_routes()

    @property
    def app(self) -> web.Application:
        return self._app

    # ------------------------------------------------------------------
    # Lifecycle
    async def start(self) -> None:
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()
        self._site = web.TCPSite(self._runner, self.host, self.port)
        try:
            await self._site.start()
        except OSError:
            await self._runner.cleanup()
            self._runner = None
            self._site = None
            raise
        logger.info("Listening on http://%s:%d", self.host, self.port)

    async def stop(self) -> None:
        if self._site:
            await self._site.stop()
            self._site = None
        if self._runner:
            await self._runner.cleanup()
            self._runner = None

    # ------------------------------------------------------------------
    def _build_routes(self) -> None:
        self._app.router.add_get("/favicon.ico", self._favicon)
        self._app.router.add_get(f"/{{folder:{'|'.join(STATIC_FOLDERS)}}}/{{name:.*}}", self._static)
        self._app.router.add_get("/api/listing", self._listing_api)
        self._app.router.add_get("/", self._index)
        self._app.router.add_post("/", self._index)

    @web.middleware
    async def _deadline(self, request: web.Request, handler) -> web.StreamResponse:
        try:
            return await asyncio.wait_for(handler(request), self.config.request_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "Request %s %s exceeded %.1fs", request.method, request.path_qs, self.config.request_timeout
            )
            streaming = request.get("streaming")
            if streaming is not None and streaming.prepared:
                streaming.force_close()
                return streaming
            raise web.HTTPServiceUnavailable(text="request timed out")

    # ------------------------------------------------------------------
    async def _query(self, request: web.Request) -> BrowseQuery:
        # decoded by hand so %XX bytes of non-UTF-8 file names survive as surrogates
        params: Dict[str, Any] = dict(_parse_fields(request.rel_url.raw_query_string))
        if request.method == "POST":
            if request.content_type == "application/x-www-form-urlencoded":
                params.update(_parse_fields(await request.text()))
            else:
                form = await request.post()
                params.update({k: v for k, v in form.items() if isinstance(v, str)})
        return BrowseQuery.from_mapping(params)

    async def _index(self, request: web.Request) -> web.StreamResponse:
        result = await self.browser.handle(await self._query(request))
        if result.download is not None:
            return await self._send_download(request, result.download)
        html = render_page(
            result.view,
            result.messages,
            download_enabled=result.download_enabled,
        )
        return web.Response(text=html, content_type="text/html")

    async def _listing_api(self, request: web.Request) -> web.StreamResponse:
        result = await self.browser.handle(await self._query(request))
        if result.download is not None:
            return await self._send_download(request, result.download)
        return web.json_response(self._payload(result))

    @staticmethod
    def _payload(result: BrowseResult) -> Dict[str, Any]:
        view = result.view
        return {
            "path": result.path,
            "avoided": result.decision.avoided,
            "allowed": result.decision.allowed,
            "download_enabled": result.download_enabled,
            "messages": result.messages.as_dict(),
            "view": view.model_dump(mode="json") if view else None,
            "toggle_marker": view.toggle_marker if view else None,
        }

    async def _send_download(self, request: web.Request, download: Download) -> web.StreamResponse:
        resp = web.StreamResponse(headers=download.headers)
        request["streaming"] = resp
        try:
            await resp.prepare(request)
            sent = await download.copy_to(resp.write)
            await resp.write_eof()
            logger.info("Sent %s (%d bytes)", download.path, sent)
        except DownloadError as exc:
            logger.warning("Download of %s failed: %s", exc.path, exc.cause)
            resp.force_close()
        except ConnectionError as exc:
            logger.warning("Download of %s aborted: %s", download.path, exc)
            resp.force_close()
        finally:
            download.close()
        return resp

    # ------------------------------------------------------------------
    def _asset(self, folder: str, name: str) -> Path:
        if not name or name.endswith("/"):
            raise web.HTTPForbidden(text="Forbidden")
        base = Path(self.config.document_root, folder).resolve()
        target = (base / name).resolve()
        if base not in target.parents:
            raise web.HTTPForbidden(text="Forbidden")
        if not target.is_file():
            raise web.HTTPNotFound()
        return target

    async def _static(self, request: web.Request) -> web.StreamResponse:
        folder = request.match_info["folder"]
        return web.FileResponse(self._asset(folder, request.match_info.get("name", "")))

    async def _favicon(self, request: web.Request) -> web.StreamResponse:
        return web.FileResponse(self._asset("img", "favicon.png"))
