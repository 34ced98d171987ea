"""
Image Proxy Service - 图片代理服务
预览渲染器无法携带 Bearer Token，附件图片又必须认证后才能下载。
本服务在 127.0.0.1 的随机端口上启动一个临时 HTTP 服务：
渲染器请求 GET /?url=<图片地址>，代理使用当前的 Memos 客户端带认证地下载图片后原样返回。
"""

import asyncio
import logging
import mimetypes
from typing import Awaitable, Callable, Optional
from urllib.parse import quote

from aiohttp import web
from yarl import URL

from ..core.config import PROXY_BIND_HOST, PROXY_CACHE_CONTROL, PROXY_FALLBACK_CONTENT_TYPE
from ..core.exceptions import ProxyException
from .memos_api import IMemosRepository

logger = logging.getLogger(__name__)

ClientProvider = Callable[[], Optional[IMemosRepository]]
ErrorReporter = Callable[[str], Awaitable[None]]


def _is_http_url(value: str) -> bool:
    try:
        url = URL(value)
    except ValueError:
        return False
    return url.scheme in ("http", "https") and bool(url.host)


def _guess_content_type(image_url: str) -> str:
    content_type, _ = mimetypes.guess_type(URL(image_url).path)
    if content_type and content_type.startswith("image/"):
        return content_type
    return PROXY_FALLBACK_CONTENT_TYPE


class ImageProxyService:
    """
    图片代理服务
    两种状态：STOPPED（_runner 为 None）和 RUNNING。
    start() 是幂等的，重复调用返回同一个端口；stop() 之后可以再次 start()。
    """

    def __init__(self, client_provider: ClientProvider, reporter: Optional[ErrorReporter] = None,
                 bind_host: str = PROXY_BIND_HOST):
        """
        :param client_provider: 每个请求调用一次，返回当前客户端快照（未配置时为 None）。
        :param reporter: 代理出错时的异步回调，通常转发到宿主日志。
        :param bind_host: 监听地址，只应是回环地址。
        """
        self.client_provider = client_provider
        self.reporter = reporter
        self.bind_host = bind_host
        self._runner: Optional[web.AppRunner] = None
        self._port = 0
        self._lock = asyncio.Lock()

    @property
    def port(self) -> int:
        return self._port

    @property
    def is_running(self) -> bool:
        return self._runner is not None

    async def start(self) -> int:
        """
        启动代理服务。

        :return: 系统分配的端口；已在运行时直接返回现有端口。
        :raises ProxyException: 绑定端口失败，此时服务保持 STOPPED。
        """
        async with self._lock:
            if self._runner is not None:
                return self._port

            app = web.Application()
            app.router.add_get("/", self._handle)
            runner = web.AppRunner(app, access_log=None)
            await runner.setup()
            try:
                site = web.TCPSite(runner, self.bind_host, 0)
                await site.start()
            except OSError as e:
                await runner.cleanup()
                raise ProxyException(f"Failed to start image proxy: {e}") from e

            if not runner.addresses:
                await runner.cleanup()
                raise ProxyException("Failed to start image proxy: no bound address")

            self._port = runner.addresses[0][1]
            self._runner = runner
            logger.info(f"Image proxy listening on {self.bind_host}:{self._port}")
            return self._port

    async def stop(self):
        """停止代理服务，未运行时什么也不做"""
        async with self._lock:
            if self._runner is None:
                return
            runner, self._runner = self._runner, None
            self._port = 0
            await runner.cleanup()
            logger.info("Image proxy stopped")

    def build_proxy_url(self, image_url: str) -> str:
        """把图片地址包装成代理地址；代理未运行时返回原地址"""
        if not image_url or not self.is_running:
            return image_url
        return f"http://{self.bind_host}:{self._port}/?url={quote(image_url, safe='')}"

    async def _report(self, message: str):
        if self.reporter is None:
            return
        try:
            await self.reporter(message)
        except Exception as e:
            logger.error(f"Failed to report proxy error: {e!r}")

    async def _handle(self, request: web.Request) -> web.Response:
        image_url = request.query.get("url", "").strip()
        client = self.client_provider()
        if not image_url or client is None or not _is_http_url(image_url):
            return web.Response(status=404, text="Not found")

        try:
            data = await client.fetch_image(image_url)
        except Exception as e:
            logger.error(f"Proxy error for {image_url}: {e!r}")
            await self._report(f"Proxy error: {e}")
            return web.Response(status=500, text="Error fetching image")

        return web.Response(
            body=data,
            content_type=_guess_content_type(image_url),
            headers={"Cache-Control": PROXY_CACHE_CONTROL}
        )
