"""
Remote service handles
"""

from .remote import RemoteService
from .queued import ChannelProvider, QueuedRemoteService

__all__ = [
    "RemoteService",
    "ChannelProvider",
    "QueuedRemoteService",
]
