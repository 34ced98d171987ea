"""
Handlers package
"""

from .query_handlers import IQueryHandler
from .handler_factory import QueryHandlerFactory
from .action_handlers import IActionHandler, ActionDispatcher
from .orchestrator import QueryOrchestrator

__all__ = ['IQueryHandler', 'QueryHandlerFactory', 'IActionHandler', 'ActionDispatcher', 'QueryOrchestrator']
