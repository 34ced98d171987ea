"""
Services package
"""

from .memos_api import IMemosRepository, MemosApiClient
from .client_slot import ClientSlot
from .image_proxy import ImageProxyService

__all__ = ['IMemosRepository', 'MemosApiClient', 'ClientSlot', 'ImageProxyService']
