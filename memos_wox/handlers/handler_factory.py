"""
Query handler factory using Factory pattern
查询处理器工厂，采用工厂模式
"""

from typing import Dict

from wox_plugin import Query

from ..core.config import COMMAND_CREATE
from .query_handlers import (
    IQueryHandler, UnconfiguredQueryHandler, CreateCommandHandler,
    ListQueryHandler, SearchQueryHandler
)

MODE_UNCONFIGURED = 'unconfigured'
MODE_LIST = 'list'
MODE_SEARCH = 'search'


class QueryHandlerFactory:
    """查询处理器工厂"""

    def __init__(self, orchestrator):
        self.orchestrator = orchestrator
        self._handlers: Dict[str, IQueryHandler] = {}
        self._register_handlers()

    def _register_handlers(self):
        """注册所有查询处理器"""
        self._handlers.update({
            MODE_UNCONFIGURED: UnconfiguredQueryHandler(self.orchestrator),
            COMMAND_CREATE: CreateCommandHandler(self.orchestrator),
            MODE_LIST: ListQueryHandler(self.orchestrator),
            MODE_SEARCH: SearchQueryHandler(self.orchestrator)
        })

    def resolve_mode(self, query: Query, configured: bool) -> str:
        """
        决定查询模式：
        未配置 -> unconfigured；create 命令 -> create；没有搜索词 -> list；否则 -> search。
        未注册的命令按普通查询处理。
        """
        if not configured:
            return MODE_UNCONFIGURED
        command = (query.command or "").lower()
        if command in self._handlers and command not in (MODE_UNCONFIGURED, MODE_LIST, MODE_SEARCH):
            return command
        if not query.search.strip():
            return MODE_LIST
        return MODE_SEARCH

    def get_handler(self, query: Query, configured: bool) -> IQueryHandler:
        """获取查询处理器"""
        return self._handlers[self.resolve_mode(query, configured)]

    def register_handler(self, command: str, handler: IQueryHandler):
        """注册新的命令处理器"""
        self._handlers[command.lower()] = handler
