"""
Memos API Service Layer - Memos API 服务层
本模块采用仓储模式（Repository Pattern）封装了对 Memos API 的所有网络请求。
- IMemosRepository: 定义了与 memo 数据交互的统一接口。
- MemosApiClient: 实现了该接口，负责具体的 HTTP 请求和响应处理。
所有公开操作（fetch_image 除外）都不会抛出异常，错误统一转换为 ApiResult / MemoListResult。
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple
from urllib.parse import quote

import aiohttp
from yarl import URL

from ..core.config import (
    DEFAULT_VISIBILITY, ERROR_BODY_LIMIT, LIST_PAGE_SIZE, REQUEST_TIMEOUT_SECONDS,
    SEARCH_CANDIDATE_LIMIT, normalize_host
)
from ..core.exceptions import MemosHttpError, MemosNetworkError
from ..core.models import ApiResult, Attachment, Memo, MemoListResult

logger = logging.getLogger(__name__)

# encodeURIComponent 不转义的字符
_FILENAME_SAFE_CHARS = "!*'()"


class ListPayloadShape(Enum):
    """列表接口可能返回的几种结构"""
    ARRAY = "array"
    WRAPPED_MEMOS = "memos"
    WRAPPED_DATA = "data"
    UNRECOGNIZED = "unrecognized"


@dataclass
class DecodedListPayload:
    shape: ListPayloadShape
    items: List[Any] = field(default_factory=list)
    keys: List[str] = field(default_factory=list)


def decode_list_payload(payload: Any) -> DecodedListPayload:
    """把列表接口的响应体解码为带标签的结果，而不是在调用处逐个探测字段。"""
    if isinstance(payload, list):
        return DecodedListPayload(ListPayloadShape.ARRAY, payload)
    if isinstance(payload, dict):
        if isinstance(payload.get("memos"), list):
            return DecodedListPayload(ListPayloadShape.WRAPPED_MEMOS, payload["memos"])
        if isinstance(payload.get("data"), list):
            return DecodedListPayload(ListPayloadShape.WRAPPED_DATA, payload["data"])
        return DecodedListPayload(ListPayloadShape.UNRECOGNIZED, keys=list(payload.keys()))
    return DecodedListPayload(ListPayloadShape.UNRECOGNIZED)


def _describe(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


class IMemosRepository(ABC):
    """
    Memos 仓储接口
    定义了所有与 Memos 笔记服务交互的标准操作。
    """

    host: str

    @abstractmethod
    async def create_memo(self, content: str, visibility: str = DEFAULT_VISIBILITY) -> ApiResult:
        """
        创建一条新的 memo。

        :param content: memo 内容，Memos 会自动从中解析 #标签。
        :param visibility: 可见性（PRIVATE / PROTECTED / PUBLIC）。
        :return: 成功时 data 为服务端返回的 memo。
        """
        pass

    @abstractmethod
    async def update_memo(self, memo_name: str, content: str) -> ApiResult:
        """更新 memo 内容"""
        pass

    @abstractmethod
    async def list_memos(self, page: int = 1, page_size: int = LIST_PAGE_SIZE) -> MemoListResult:
        """
        获取 memo 列表（按创建时间倒序）。

        :param page: 页码。
        :param page_size: 每页数量。
        """
        pass

    @abstractmethod
    async def search_memos(self, query: str) -> MemoListResult:
        """搜索 memo"""
        pass

    @abstractmethod
    async def delete_memo(self, memo_name: str) -> ApiResult:
        """删除 memo"""
        pass

    @abstractmethod
    def build_attachment_url(self, attachment: Attachment) -> str:
        """附件地址，无法确定时返回空字符串"""
        pass

    @abstractmethod
    def memo_url(self, memo_name: str) -> str:
        """memo 的网页地址"""
        pass

    @abstractmethod
    async def fetch_image(self, url: str) -> bytes:
        """带认证地下载图片，失败时抛出 MemosApiException"""
        pass

    async def close(self):
        pass

    async def close_when_idle(self):
        await self.close()


class MemosApiClient(IMemosRepository):
    """
    Memos API 客户端实现
    负责与 Memos 后端进行实际的 HTTP 通信。
    """

    def __init__(self, host: str, token: str, timeout: float = REQUEST_TIMEOUT_SECONDS):
        """
        初始化 API 客户端。

        :param host: Memos 服务地址，末尾的斜杠会被去掉。
        :param token: 用于认证的 Bearer Token（Access Token）。
        :param timeout: 单次请求的超时时间（秒）。
        """
        self.host = normalize_host(host)
        self.token = token
        self.timeout = timeout
        self.session: Optional[aiohttp.ClientSession] = None
        self._inflight = 0
        self._closing = False

    async def _get_session(self) -> aiohttp.ClientSession:
        """
        获取 aiohttp.ClientSession 实例。
        采用延迟初始化，确保会话在事件循环内创建，并在整个客户端生命周期内共享。
        """
        if self.session is None or self.session.closed:
            headers = {
                'Authorization': f'Bearer {self.token}',
                'Content-Type': 'application/json',
                'Cookie': f'memos.access-token={self.token}'
            }
            self.session = aiohttp.ClientSession(
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                cookie_jar=aiohttp.DummyCookieJar()
            )
        return self.session

    def _resolve(self, target: str) -> str:
        """相对路径拼接到 host 上，绝对地址原样返回"""
        if URL(target).is_absolute():
            return target
        return f"{self.host}/{target.lstrip('/')}"

    async def _request(self, method: str, target: str, read_bytes: bool = False, **kwargs) -> Tuple[int, Any]:
        """
        统一的请求方法，封装了请求的发送、错误分类和响应解析。

        :param method: HTTP 请求方法 (e.g., "GET", "POST").
        :param target: API 路径 (e.g., "/api/v1/memos") 或绝对地址。
        :param read_bytes: 为 True 时返回原始字节，否则解析 JSON。
        :return: (状态码, 响应内容)。
        :raises MemosHttpError: 服务端返回了非 2xx 状态码或无法解析的响应体。
        :raises MemosNetworkError: 连接失败、DNS 失败或超时。
        """
        session = await self._get_session()
        url = self._resolve(target)
        self._inflight += 1
        try:
            async with session.request(method, url, **kwargs) as response:
                if response.status >= 300:
                    text = await response.text(errors="replace")
                    raise MemosHttpError(response.status, text)
                if read_bytes:
                    return response.status, await response.read()
                try:
                    return response.status, await response.json(content_type=None)
                except ValueError as e:
                    raise MemosHttpError(response.status, f"invalid JSON body ({e})")
        except (asyncio.TimeoutError, aiohttp.ServerTimeoutError) as e:
            raise MemosNetworkError(f"timeout of {self.timeout}s exceeded", e)
        except (aiohttp.ClientConnectionError, aiohttp.ClientPayloadError) as e:
            raise MemosNetworkError(_describe(e), e)
        except aiohttp.ClientResponseError as e:
            raise MemosHttpError(e.status, e.message)
        finally:
            self._inflight -= 1
            if self._closing and self._inflight == 0:
                await self.close()

    @staticmethod
    def _error_message(exc: Exception) -> str:
        """把异常转换为给用户看的错误描述"""
        if isinstance(exc, MemosHttpError):
            return f"HTTP error: {exc.status} - {exc.body[:ERROR_BODY_LIMIT]}"
        if isinstance(exc, MemosNetworkError):
            return f"Network error: {exc}"
        return f"Unknown error: {_describe(exc)}"

    async def create_memo(self, content: str, visibility: str = DEFAULT_VISIBILITY) -> ApiResult:
        """创建 memo"""
        data = {
            "content": content,
            "visibility": visibility
        }
        try:
            status, body = await self._request("POST", "/api/v1/memos", json=data)
        except Exception as e:
            logger.error(f"Failed to create memo: {e!r}")
            return ApiResult.fail(self._error_message(e))

        if status in (200, 201):
            return ApiResult.ok(body)
        return ApiResult.fail(f"Create failed (HTTP {status}): {json.dumps(body)}")

    async def update_memo(self, memo_name: str, content: str) -> ApiResult:
        """更新 memo"""
        try:
            status, body = await self._request("PATCH", f"/api/v1/{memo_name}", json={"content": content})
        except Exception as e:
            logger.error(f"Failed to update memo {memo_name}: {e!r}")
            return ApiResult.fail(self._error_message(e))

        if status == 200:
            return ApiResult.ok(body)
        return ApiResult.fail(f"Update failed (HTTP {status}): {json.dumps(body)}")

    async def list_memos(self, page: int = 1, page_size: int = LIST_PAGE_SIZE) -> MemoListResult:
        """获取 memo 列表"""
        params = {"page": str(page), "pageSize": str(page_size)}
        try:
            _, body = await self._request("GET", "/api/v1/memos", params=params)
        except Exception as e:
            logger.error(f"Failed to list memos: {e!r}")
            return MemoListResult(error=self._error_message(e))

        decoded = decode_list_payload(body)
        if decoded.shape is ListPayloadShape.UNRECOGNIZED:
            if isinstance(body, dict):
                keys = ", ".join(decoded.keys) or "empty object"
                return MemoListResult(error=f"Invalid response format: {keys}")
            return MemoListResult(error="Invalid response format")

        memos = []
        for item in decoded.items:
            if not isinstance(item, dict):
                logger.warning(f"Skipping malformed memo entry: {item!r}")
                continue
            memos.append(Memo.from_dict(item))
        return MemoListResult(memos=memos)

    async def search_memos(self, query: str) -> MemoListResult:
        """
        搜索 memo
        在客户端过滤最近的 SEARCH_CANDIDATE_LIMIT 条 memo（不区分大小写的子串匹配），
        更早的 memo 不会出现在结果中。
        """
        result = await self.list_memos(1, SEARCH_CANDIDATE_LIMIT)
        if result.error:
            return MemoListResult(error=result.error)

        try:
            query_lower = query.lower()
            return MemoListResult(memos=[memo for memo in result.memos if query_lower in memo.content.lower()])
        except Exception as e:
            logger.error(f"Search filtering failed: {e!r}")
            return MemoListResult(error=f"Search error: {_describe(e)}")

    async def delete_memo(self, memo_name: str) -> ApiResult:
        """删除 memo"""
        try:
            status, _ = await self._request("DELETE", f"/api/v1/{memo_name}")
        except Exception as e:
            logger.error(f"Failed to delete memo {memo_name}: {e!r}")
            return ApiResult.fail(self._error_message(e))

        if status in (200, 204):
            return ApiResult.ok()
        return ApiResult.fail(f"Delete failed (HTTP {status})")

    def build_attachment_url(self, attachment: Attachment) -> str:
        if attachment.external_link:
            return attachment.external_link
        if not attachment.name or not attachment.filename:
            return ""
        return f"{self.host}/file/{attachment.name}/{quote(attachment.filename, safe=_FILENAME_SAFE_CHARS)}"

    def memo_url(self, memo_name: str) -> str:
        return f"{self.host}/{memo_name}"

    async def fetch_image(self, url: str) -> bytes:
        """下载图片（与 API 请求使用同一个带认证的会话）"""
        _, data = await self._request("GET", url, read_bytes=True)
        return data

    async def close(self):
        """关闭连接"""
        if self.session and not self.session.closed:
            await self.session.close()

    async def close_when_idle(self):
        """
        客户端被替换后调用：没有进行中的请求时立即关闭，
        否则由最后一个完成的请求负责关闭。
        """
        self._closing = True
        if self._inflight == 0:
            await self.close()
