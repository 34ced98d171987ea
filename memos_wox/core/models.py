"""
Core Domain Models - 核心领域模型
本模块定义了插件业务逻辑中使用的核心数据结构。
Memo / Attachment 从 Memos API 的 JSON 构造，构造后不再修改。
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union


@dataclass(frozen=True)
class Attachment:
    """
    附件数据模型
    external_link 存在时优先于根据 name / filename 拼出的地址。
    """
    name: str
    filename: str
    type: str = ""
    size: Union[int, str] = 0
    external_link: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Attachment":
        return cls(
            name=data.get("name") or "",
            filename=data.get("filename") or "",
            type=data.get("type") or "",
            size=data.get("size") or 0,
            external_link=data.get("externalLink") or None,
        )

    @property
    def is_image(self) -> bool:
        return self.type.startswith("image/")


@dataclass(frozen=True)
class Memo:
    """
    Memo 数据模型
    后端可能用 createTime 或 createdTs 表示创建时间；
    旧版本的 Memos 把附件放在 resources 字段里。
    """
    name: str
    content: str
    create_time: Optional[str] = None
    created_ts: Optional[str] = None
    attachments: Tuple[Attachment, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Memo":
        raw_attachments = data.get("attachments")
        if raw_attachments is None:
            raw_attachments = data.get("resources") or []
        created_ts = data.get("createdTs")
        return cls(
            name=data.get("name") or "",
            content=data.get("content") or "",
            create_time=data.get("createTime") or None,
            created_ts=str(created_ts) if created_ts else None,
            attachments=tuple(
                Attachment.from_dict(item) for item in raw_attachments if isinstance(item, dict)
            ),
        )


@dataclass
class ApiResult:
    """
    变更类调用的统一结果
    success=False 时 error 必须是非空字符串。
    """
    success: bool
    data: Any = None
    error: Optional[str] = None

    def __post_init__(self):
        if not self.success and not self.error:
            raise ValueError("A failed ApiResult must carry an error message")

    @classmethod
    def ok(cls, data: Any = None) -> "ApiResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str) -> "ApiResult":
        return cls(success=False, error=error)


@dataclass
class MemoListResult:
    """列表 / 搜索结果"""
    memos: List[Memo] = field(default_factory=list)
    error: Optional[str] = None
