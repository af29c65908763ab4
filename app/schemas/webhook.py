"""
Inbound webhook payload shapes sent by Snipe-IT.

Two shapes reach the same endpoint:
- Structured events: ``{"event": "asset.checkedout", "asset": {...}}``
- Slack-style notifications: ``{"channel", "text", "attachments": [...]}``
"""
from typing import List, Optional

from app.schemas.base import WebhookSchema


class AssignedUser(WebhookSchema):
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    name: Optional[str] = None

    @property
    def real_name(self) -> str:
        full_name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return full_name or (self.name or "").strip()


class AssetLocation(WebhookSchema):
    name: Optional[str] = None


class StructuredAsset(WebhookSchema):
    serial: Optional[str] = None
    asset_tag: Optional[str] = None
    assigned_to: Optional[AssignedUser] = None
    location: Optional[AssetLocation] = None


class StructuredEvent(WebhookSchema):
    event: str
    asset: Optional[StructuredAsset] = None


class ChatField(WebhookSchema):
    title: Optional[str] = None
    value: Optional[str] = None


class ChatAttachment(WebhookSchema):
    title: Optional[str] = None
    pretext: Optional[str] = None
    text: Optional[str] = None
    fields: List[ChatField] = []


class ChatEvent(WebhookSchema):
    channel: Optional[str] = None
    text: Optional[str] = None
    attachments: List[ChatAttachment] = []
