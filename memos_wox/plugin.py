"""
Memos Plugin - 插件主体
本模块是插件的协调中心，核心职责是：
1. 在 init 时拿到宿主 API，并根据设置创建 Memos 客户端。
2. 初始化并装配所有核心组件（客户端槽、图片代理、查询编排器）。
3. 监听 host / token 设置变化，整体替换客户端。
4. 管理插件的生命周期，在 unload 时停止图片代理并关闭连接。
"""

import logging
import webbrowser
from typing import Callable, List, Optional

from wox_plugin import Context, LogLevel, PluginInitParams, PublicAPI, Query, Result

from .core.config import CLIENT_SETTING_KEYS, SETTING_HOST, SETTING_TOKEN, ClientConfig
from .core.exceptions import ProxyException
from .handlers.action_handlers import UrlOpener
from .handlers.orchestrator import QueryOrchestrator
from .services.client_slot import ClientSlot
from .services.image_proxy import ImageProxyService
from .services.memos_api import IMemosRepository, MemosApiClient

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str, str], IMemosRepository]


class MemosPlugin:
    """
    Memos 主插件类
    采用依赖注入的方式将各个模块组合在一起：
    - 客户端放在 ClientSlot 中，设置变化时整体替换。
    - 图片代理和查询编排器都从同一个 ClientSlot 读取客户端。
    """

    def __init__(self, client_factory: ClientFactory = MemosApiClient, url_opener: UrlOpener = webbrowser.open):
        self.client_factory = client_factory
        self.url_opener = url_opener
        self.api: Optional[PublicAPI] = None
        self.plugin_directory = ""
        self.client_slot = ClientSlot()
        self.proxy = ImageProxyService(self.client_slot.get, reporter=self._report_proxy_error)
        self.orchestrator: Optional[QueryOrchestrator] = None
        self._init_ctx: Optional[Context] = None

    async def init(self, ctx: Context, init_params: PluginInitParams):
        """插件初始化"""
        self.api = init_params.api
        self.plugin_directory = init_params.plugin_directory
        self._init_ctx = ctx

        await self._rebuild_client(ctx)
        await self.api.on_setting_changed(ctx, self._on_setting_changed)
        await self.api.on_unload(ctx, self.unload)

        self.orchestrator = QueryOrchestrator(self.api, self.client_slot, self.proxy, url_opener=self.url_opener)

        try:
            port = await self.proxy.start()
            await self.api.log(ctx, LogLevel.INFO, f"Image proxy started on port {port}")
        except ProxyException as e:
            # 没有代理时预览里的图片直接使用原地址
            logger.error(f"Image proxy unavailable: {e}")
            await self.api.log(ctx, LogLevel.ERROR, f"Image proxy unavailable: {e}")

        await self.api.log(ctx, LogLevel.INFO, "Memos plugin initialized")

    async def query(self, ctx: Context, query: Query) -> List[Result]:
        if self.orchestrator is None:
            logger.warning("Query received before init")
            return []
        return await self.orchestrator.query(ctx, query)

    async def unload(self, ctx: Context):
        """
        插件卸载时的清理工作
        由 init 通过 on_unload 注册给宿主；停止图片代理和关闭客户端互不影响
        """
        try:
            await self.proxy.stop()
        except Exception as e:
            logger.error(f"Error stopping image proxy: {e!r}")

        previous = self.client_slot.replace(None)
        if previous is not None:
            try:
                await previous.close()
            except Exception as e:
                logger.error(f"Error closing Memos client: {e!r}")
        logger.info("Memos plugin unloaded")

    async def _on_setting_changed(self, ctx: Context, key: str, value: str):
        if key in CLIENT_SETTING_KEYS:
            await self._rebuild_client(ctx)

    async def _rebuild_client(self, ctx: Context):
        """
        根据当前设置重新创建客户端并整体换入。
        host 或 token 为空时换入 None，查询会显示未配置提示。
        """
        host = await self.api.get_setting(ctx, SETTING_HOST)
        token = await self.api.get_setting(ctx, SETTING_TOKEN)
        config = ClientConfig.from_settings(host, token)

        client = self.client_factory(config.host, config.token) if config.is_complete else None
        previous = self.client_slot.replace(client)
        if previous is not None:
            await previous.close_when_idle()

        if client is None:
            await self.api.log(ctx, LogLevel.INFO, "Memos host or token not configured")
        else:
            await self.api.log(ctx, LogLevel.INFO, f"Memos client configured for {config.host}")

    async def _report_proxy_error(self, message: str):
        if self.api is None or self._init_ctx is None:
            return
        await self.api.log(self._init_ctx, LogLevel.ERROR, message)
