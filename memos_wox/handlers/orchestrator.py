"""
Query Orchestrator - 查询编排
把一次查询变成有序的结果列表：读取一次客户端快照，选择查询处理器，
由处理器调用 Memos API 并通过结果构建器组装结果。
所有协作者（宿主 API、客户端槽、图片代理、模板渲染器）都通过构造参数传入。
"""

import logging
import webbrowser
from typing import List, Optional

from wox_plugin import Context, LogLevel, PublicAPI, Query, Result

from ..services.client_slot import ClientSlot
from ..services.image_proxy import ImageProxyService
from ..utils import response_manager as i18n
from ..utils.response_manager import ResponseManager
from ..utils.template_renderer import ITemplateRenderer, Jinja2TemplateRenderer
from .action_handlers import ActionDispatcher, UrlOpener
from .handler_factory import QueryHandlerFactory
from .result_builder import WARNING_ICON, MemoResultBuilder

logger = logging.getLogger(__name__)


class QueryOrchestrator:
    """查询编排器"""

    def __init__(self, api: PublicAPI, client_slot: ClientSlot, proxy: ImageProxyService,
                 renderer: Optional[ITemplateRenderer] = None, url_opener: UrlOpener = webbrowser.open):
        self.api = api
        self.client_slot = client_slot
        self.proxy = proxy
        self.responses = ResponseManager(api)
        self.renderer = renderer or Jinja2TemplateRenderer()
        self.dispatcher = ActionDispatcher(api, client_slot, self.responses, url_opener)
        self.result_builder = MemoResultBuilder(self.responses, self.renderer, proxy, self.dispatcher)
        self.handler_factory = QueryHandlerFactory(self)

    async def query(self, ctx: Context, query: Query) -> List[Result]:
        """
        处理一次查询。
        结果可能因为查询被新的输入取代而被宿主丢弃，这里不做任何假设。
        """
        client = self.client_slot.get()
        handler = self.handler_factory.get_handler(query, client is not None)
        try:
            return await handler.handle(ctx, query, client)
        except Exception as e:
            logger.error(f"Query handler error: {e!r}")
            await self.api.log(ctx, LogLevel.ERROR, f"Query failed: {e}")
            return [await self.result_builder.build_message_result(
                ctx, i18n.SEARCH_ERROR_TITLE, f"Unknown error: {e}", WARNING_ICON
            )]
