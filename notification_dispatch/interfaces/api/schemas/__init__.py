from .message import AssetReference, MessageCreateRequest, MessageRead, StreamItemRead

__all__ = [
    "AssetReference",
    "MessageCreateRequest",
    "MessageRead",
    "StreamItemRead",
]
