"""
Core package
"""

from .models import Memo, Attachment, ApiResult, MemoListResult
from .config import ClientConfig
from .exceptions import (
    MemosWoxException, MemosApiException, MemosHttpError, MemosNetworkError,
    ProxyException, ActionPayloadException
)

__all__ = [
    'Memo', 'Attachment', 'ApiResult', 'MemoListResult', 'ClientConfig',
    'MemosWoxException', 'MemosApiException', 'MemosHttpError', 'MemosNetworkError',
    'ProxyException', 'ActionPayloadException'
]
