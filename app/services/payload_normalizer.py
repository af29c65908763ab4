"""
Turns inbound Snipe-IT webhook bodies into canonical pipeline records.

Supported shapes, decided by which top-level keys are present:

- ``event`` present: a structured event. ``asset.checkedin`` and
  ``asset.checkedout`` become a SyncRequest; any other event name is an
  IgnoredEvent.
- ``channel`` / ``text`` / ``attachments`` present: a Slack-style
  notification. The check direction, asset tag and user are scraped from
  free text (see CHAT_RULES). Snipe-IT's "Test Integration" message is
  recognised and returned as a TestPing.

Scraping the Slack shape is best effort. In particular the Jamf username is
derived from the display name (lowercased, whitespace removed), which is
only correct when directory usernames follow that convention.

Anything that is not a JSON object of one of those shapes raises
MalformedPayloadError.
"""
import json
import logging
import re
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from app.core.enums import EventKind, IdentifierType, PayloadKind
from app.core.exceptions import MalformedPayloadError
from app.schemas.sync import IgnoredEvent, NormalizedPayload, SyncRequest, TestPing
from app.schemas.webhook import ChatEvent, StructuredEvent

logger = logging.getLogger(__name__)

STRUCTURED_EVENTS = {
    "asset.checkedin": EventKind.CHECKED_IN,
    "asset.checkedout": EventKind.CHECKED_OUT,
}

CHAT_KEYS = ("channel", "text", "attachments")

# Named capture rules for the Slack-style notification
CHAT_RULES = {
    # "Asset checked out" / "MacBook 28 (18163) checked in"
    "event_phrase": re.compile(r"\bchecked\s+(?P<direction>out|in)\b", re.IGNORECASE),
    # "<name> (<tag>)", optionally followed by " - <model>". Names may carry
    # their own "(2019)", so the last group is the tag
    "asset_tag": re.compile(r"\((?P<tag>\d+)\)"),
    # Slack link markup "<url|Visible Text>"
    "link_text": re.compile(r"<[^|>]*\|(?P<text>[^>]+)>"),
}

CHAT_DIRECTIONS = {
    "out": EventKind.CHECKED_OUT,
    "in": EventKind.CHECKED_IN,
}

# Field labels that name the user, in order of preference
USER_FIELD_LABELS = ("to", "administrator")
LOCATION_FIELD_LABELS = ("location",)


def normalize_payload(
    body: Union[bytes, str, Dict[str, Any]],
    test_ping_channel: str = "#endor",
    test_ping_marker: str = "integration with Snipe-IT is working",
) -> NormalizedPayload:
    """
    Classify and normalize one webhook body

    Returns:
        SyncRequest, IgnoredEvent or TestPing

    Raises:
        MalformedPayloadError: the body is not a supported JSON payload
    """
    data = _load_json(body)

    if "event" in data:
        return normalize_structured_event(data)

    if any(key in data for key in CHAT_KEYS):
        return normalize_chat_event(data, test_ping_channel, test_ping_marker)

    raise MalformedPayloadError(
        f"Unrecognized payload shape (keys: {', '.join(sorted(data)) or 'none'})"
    )


def _load_json(body: Union[bytes, str, Dict[str, Any]]) -> Dict[str, Any]:
    if isinstance(body, dict):
        return body

    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            raise MalformedPayloadError("Payload is not valid UTF-8")

    if not body or not body.strip():
        raise MalformedPayloadError("Empty payload")

    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        raise MalformedPayloadError(f"Payload is not valid JSON: {e.msg}")

    if not isinstance(data, dict):
        raise MalformedPayloadError("Payload must be a JSON object")
    return data


def normalize_structured_event(data: Dict[str, Any]) -> NormalizedPayload:
    try:
        event = StructuredEvent.model_validate(data)
    except ValidationError as e:
        raise MalformedPayloadError(f"Invalid structured event: {e.errors()[0]['msg']}")

    event_name = event.event.strip().lower()
    event_kind = STRUCTURED_EVENTS.get(event_name)
    if event_kind is None:
        logger.info(f"Ignoring structured event {event.event!r}")
        return IgnoredEvent(event_name=event.event, payload_kind=PayloadKind.STRUCTURED)

    asset = event.asset
    if asset is None:
        raise MalformedPayloadError(f"Event {event_name} has no asset")

    serial = (asset.serial or "").strip()
    asset_tag = (asset.asset_tag or "").strip()
    if serial:
        identifier, identifier_type = serial, IdentifierType.SERIAL
    elif asset_tag:
        identifier, identifier_type = asset_tag, IdentifierType.ASSET_TAG
    else:
        raise MalformedPayloadError(f"Event {event_name} has neither a serial nor an asset tag")

    user = asset.assigned_to
    location = asset.location

    return SyncRequest(
        event_kind=event_kind,
        asset_identifier=identifier,
        identifier_type=identifier_type,
        username=(user.username or "") if user else "",
        real_name=user.real_name if user else "",
        location_name=(location.name or "").strip() if location else "",
        payload_kind=PayloadKind.STRUCTURED,
    )


def normalize_chat_event(
    data: Dict[str, Any],
    test_ping_channel: str,
    test_ping_marker: str,
) -> NormalizedPayload:
    try:
        event = ChatEvent.model_validate(data)
    except ValidationError as e:
        raise MalformedPayloadError(f"Invalid notification payload: {e.errors()[0]['msg']}")

    if is_test_ping(event, test_ping_channel, test_ping_marker):
        return TestPing(channel=event.channel or "")

    event_kind = find_event_kind(event)
    if event_kind is None:
        summary = (event.text or _first_title(event) or "").strip().splitlines()
        event_name = summary[0] if summary else ""
        logger.info(f"Ignoring notification without a check-in/check-out phrase: {event_name!r}")
        return IgnoredEvent(event_name=event_name, payload_kind=PayloadKind.CHAT)

    asset_tag = find_asset_tag(event)
    if asset_tag is None:
        raise MalformedPayloadError("Notification title has no asset tag in parentheses")

    fields = collect_fields(event)
    real_name = first_field(fields, USER_FIELD_LABELS)
    location_name = first_field(fields, LOCATION_FIELD_LABELS)

    return SyncRequest(
        event_kind=event_kind,
        asset_identifier=asset_tag,
        identifier_type=IdentifierType.ASSET_TAG,
        username=derive_username(real_name),
        real_name=real_name,
        location_name=location_name,
        payload_kind=PayloadKind.CHAT,
    )


def is_test_ping(event: ChatEvent, channel: str, marker: str) -> bool:
    if not channel or (event.channel or "").strip() != channel:
        return False
    return marker.casefold() in (event.text or "").casefold()


def find_event_kind(event: ChatEvent) -> Optional[EventKind]:
    """Search the message text first, then each attachment"""
    candidates = [event.text]
    for attachment in event.attachments:
        candidates.extend([attachment.pretext, attachment.title, attachment.text])

    for candidate in candidates:
        if not candidate:
            continue
        match = CHAT_RULES["event_phrase"].search(candidate)
        if match:
            return CHAT_DIRECTIONS[match.group("direction").lower()]
    return None


def find_asset_tag(event: ChatEvent) -> Optional[str]:
    for attachment in event.attachments:
        matches = list(CHAT_RULES["asset_tag"].finditer(attachment.title or ""))
        if matches:
            return matches[-1].group("tag")
    return None


def collect_fields(event: ChatEvent) -> Dict[str, str]:
    """Field label (lowercased) -> unwrapped value; the first occurrence wins"""
    fields: Dict[str, str] = {}
    for attachment in event.attachments:
        for field in attachment.fields:
            label = (field.title or "").strip().lower()
            if label and label not in fields:
                fields[label] = unwrap_link(field.value or "")
    return fields


def first_field(fields: Dict[str, str], labels) -> str:
    for label in labels:
        value = fields.get(label)
        if value:
            return value
    return ""


def unwrap_link(value: str) -> str:
    """Slack link markup <http://x|Jane Doe> becomes Jane Doe; plain text is only stripped"""
    match = CHAT_RULES["link_text"].search(value)
    if match:
        return match.group("text").strip()
    return value.strip()


def derive_username(real_name: str) -> str:
    """Jane Doe -> janedoe"""
    return re.sub(r"\s+", "", real_name).lower()


def _first_title(event: ChatEvent) -> Optional[str]:
    for attachment in event.attachments:
        if attachment.title:
            return attachment.title
    return None
