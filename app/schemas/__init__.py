"""
Schema exports for the application.
"""

# Base schemas
from .base import BaseSchema, WebhookSchema

# Inbound payload shapes
from .webhook import (
    AssignedUser,
    AssetLocation,
    StructuredAsset,
    StructuredEvent,
    ChatField,
    ChatAttachment,
    ChatEvent
)

# Canonical pipeline records
from .sync import SyncRequest, IgnoredEvent, TestPing, NormalizedPayload, AuditRecord, SyncResult
