"""
Core exceptions
核心异常定义
"""

from typing import Optional


class MemosWoxException(Exception):
    """插件基础异常"""
    pass


class MemosApiException(MemosWoxException):
    """Memos API 异常"""
    pass


class MemosHttpError(MemosApiException):
    """服务端已响应，但状态码或响应体不可用"""

    def __init__(self, status: int, body: str = ""):
        self.status = status
        self.body = body
        super().__init__(f"{status} - {body}")


class MemosNetworkError(MemosApiException):
    """请求已发出但没有收到响应（超时、DNS、连接被拒绝）"""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


class ProxyException(MemosWoxException):
    """图片代理服务异常"""
    pass


class ActionPayloadException(MemosWoxException):
    """动作上下文数据无法解码"""
    pass