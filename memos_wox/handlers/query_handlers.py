"""
Query Handlers - 查询处理器
本模块采用命令模式（Command Pattern）和工厂模式（Factory Pattern）。
- IQueryHandler: 定义了所有查询处理器的统一接口。
- 每种查询模式（未配置、创建命令、列表、搜索）由一个具体处理器负责生成结果。
- QueryHandlerFactory（在 handler_factory.py 中）根据配置和查询内容选择处理器。
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from wox_plugin import Context, Query, Result

from ..core.config import LIST_PAGE_SIZE
from ..core.models import MemoListResult
from ..services.memos_api import IMemosRepository
from ..utils import response_manager as i18n
from .result_builder import WARNING_ICON


class IQueryHandler(ABC):
    """
    查询处理器接口
    定义了所有具体查询处理器必须实现的 `handle` 方法。
    """

    def __init__(self, orchestrator):
        self.orchestrator = orchestrator

    @property
    def builder(self):
        return self.orchestrator.result_builder

    @property
    def responses(self):
        return self.orchestrator.responses

    @abstractmethod
    async def handle(self, ctx: Context, query: Query, client: Optional[IMemosRepository]) -> List[Result]:
        """
        处理查询的抽象方法。

        :param ctx: 宿主上下文。
        :param query: 用户查询。
        :param client: 本次查询读取到的客户端快照，未配置时为 None。
        :return: 按顺序排列的结果列表。
        """
        pass


class UnconfiguredQueryHandler(IQueryHandler):
    """未配置 host 或 token 时的处理器，不管查询内容是什么"""

    async def handle(self, ctx: Context, query: Query, client: Optional[IMemosRepository]) -> List[Result]:
        sub_title = await self.responses.get_response(ctx, i18n.UNCONFIGURED_SUBTITLE)
        return [await self.builder.build_message_result(ctx, i18n.UNCONFIGURED_TITLE, sub_title)]


class CreateCommandHandler(IQueryHandler):
    """'create' 命令的具体处理器"""

    async def handle(self, ctx: Context, query: Query, client: Optional[IMemosRepository]) -> List[Result]:
        content = query.search.strip()
        if not content:
            # 没有内容时只给出用法提示，不请求网络
            return [
                await self.builder.build_message_result(
                    ctx, i18n.CREATE_HINT_TITLE,
                    await self.responses.get_response(ctx, i18n.CREATE_HINT_SUBTITLE)
                ),
                await self.builder.build_message_result(
                    ctx, i18n.CREATE_TAGS_HINT_TITLE,
                    await self.responses.get_response(ctx, i18n.CREATE_TAGS_HINT_SUBTITLE)
                )
            ]

        return [await self.builder.build_create_result(
            ctx, content,
            title=await self.responses.create_title(ctx, content),
            sub_title=await self.responses.get_response(ctx, i18n.CREATE_SUBTITLE)
        )]


class MemoListingHandler(IQueryHandler):
    """列表和搜索共用的结果映射"""

    async def _build_memo_results(self, ctx: Context, result: MemoListResult,
                                  client: IMemosRepository) -> List[Result]:
        total = len(result.memos)
        # 服务端已按时间倒序排列，分数按位置严格递减
        return [
            await self.builder.build_memo_result(ctx, memo, client, score=total - index)
            for index, memo in enumerate(result.memos)
        ]


class ListQueryHandler(MemoListingHandler):
    """没有搜索词时列出最近的 memo"""

    async def handle(self, ctx: Context, query: Query, client: Optional[IMemosRepository]) -> List[Result]:
        result = await client.list_memos(1, LIST_PAGE_SIZE)

        if result.error:
            return [await self.builder.build_message_result(ctx, i18n.LIST_ERROR_TITLE, result.error, WARNING_ICON)]
        if not result.memos:
            return [await self.builder.build_message_result(
                ctx, i18n.NO_MEMOS_TITLE, await self.responses.get_response(ctx, i18n.NO_MEMOS_SUBTITLE)
            )]
        return await self._build_memo_results(ctx, result, client)


class SearchQueryHandler(MemoListingHandler):
    """按搜索词搜索 memo；没有结果时提供用搜索词创建 memo"""

    async def handle(self, ctx: Context, query: Query, client: Optional[IMemosRepository]) -> List[Result]:
        search = query.search.strip()
        result = await client.search_memos(search)

        if result.error:
            return [await self.builder.build_message_result(ctx, i18n.SEARCH_ERROR_TITLE, result.error, WARNING_ICON)]
        if not result.memos:
            return [await self.builder.build_create_result(
                ctx, search,
                title=await self.responses.search_empty_title(ctx, search),
                sub_title=await self.responses.get_response(ctx, i18n.SEARCH_EMPTY_SUBTITLE)
            )]
        return await self._build_memo_results(ctx, result, client)
