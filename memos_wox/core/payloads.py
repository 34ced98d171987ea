"""
Action payloads - 动作负载
每个结果动作只携带执行所需的数据。负载被编码进启动器的 ContextData
（只能是字符串字典），动作触发时再解码、校验，然后交给对应的动作处理器。
"""

from dataclasses import dataclass, fields
from typing import Dict, Type, Union

from .exceptions import ActionPayloadException

ACTION_KEY = "action"


@dataclass(frozen=True)
class OpenMemoPayload:
    url: str
    kind = "open"


@dataclass(frozen=True)
class CopyMemoPayload:
    content: str
    kind = "copy"


@dataclass(frozen=True)
class EditMemoPayload:
    name: str
    content: str
    kind = "edit"


@dataclass(frozen=True)
class DeleteMemoPayload:
    name: str
    kind = "delete"


@dataclass(frozen=True)
class CreateMemoPayload:
    content: str
    kind = "create"


ActionPayload = Union[OpenMemoPayload, CopyMemoPayload, EditMemoPayload, DeleteMemoPayload, CreateMemoPayload]

PAYLOAD_TYPES: Dict[str, Type] = {
    payload_type.kind: payload_type
    for payload_type in (OpenMemoPayload, CopyMemoPayload, EditMemoPayload, DeleteMemoPayload, CreateMemoPayload)
}

# 这些字段为空时动作没有意义
_REQUIRED_NON_EMPTY = {"url", "name"}


def encode_payload(payload: ActionPayload) -> Dict[str, str]:
    """把负载编码为 ContextData 字典"""
    data = {ACTION_KEY: payload.kind}
    for item in fields(payload):
        data[item.name] = getattr(payload, item.name)
    return data


def decode_payload(data: Dict[str, str]) -> ActionPayload:
    """
    解码并校验 ContextData。

    :param data: 启动器回传的上下文数据。
    :return: 对应类型的负载对象。
    :raises ActionPayloadException: 动作类型未知、字段缺失或类型不对时抛出。
    """
    if not isinstance(data, dict):
        raise ActionPayloadException(f"Context data must be a mapping, got {type(data).__name__}")

    kind = data.get(ACTION_KEY)
    payload_type = PAYLOAD_TYPES.get(kind)
    if payload_type is None:
        raise ActionPayloadException(f"Unknown action kind: {kind!r}")

    values = {}
    for item in fields(payload_type):
        value = data.get(item.name)
        if not isinstance(value, str):
            raise ActionPayloadException(f"Action '{kind}' is missing field '{item.name}'")
        if item.name in _REQUIRED_NON_EMPTY and not value:
            raise ActionPayloadException(f"Action '{kind}' has an empty '{item.name}'")
        values[item.name] = value
    return payload_type(**values)
