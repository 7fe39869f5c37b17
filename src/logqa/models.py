"""
DeviceLog QA Data Model

Field vocabulary for the device_logs collection.

A log record is a flat document of identifiers, timestamps and a free-text
summary, plus a nested ``LogData`` object of device attributes which itself
nests ``LogData.TagDetail`` (alert-tag details). Records that have been
through the embedding backfill also carry an ``embedding`` vector.
"""

from types import MappingProxyType
from typing import Any, Mapping, Optional


# ============================================================
# CANONICAL FIELDS
# ============================================================

EMBEDDING_FIELD = "embedding"

# Filtered by exact, case-sensitive match; everything else is a regex match
IDENTIFIER_FIELDS = frozenset({"DeviceId", "OrganizationId", "UserId", "TagId"})


# ============================================================
# FIELD ALIASES
# ============================================================

FIELD_ALIASES: Mapping[str, str] = MappingProxyType({
    # Top-level
    "deviceid": "DeviceId",
    "organizationid": "OrganizationId",
    "organisationid": "OrganizationId",
    "userid": "UserId",
    "tagid": "TagId",
    "timestamp": "Timestamp",
    "date": "Date",
    "hour": "Hour",
    "month": "Month",
    "year": "Year",
    "index": "Index",
    "appname": "AppName",
    "loglevel": "LogLevel",
    "loglabel": "LogLabel",
    "logsummary": "LogSummary",
    "createdat": "CreatedAt",

    # LogData
    "devicename": "LogData.DeviceName",
    "devicetype": "LogData.DeviceType",
    "model": "LogData.Model",
    "loggedevent": "LogData.LoggedEvent",
    "messagetype": "LogData.MessageType",
    "state": "LogData.State",
    "statecode": "LogData.StateCode",
    "tag": "LogData.Tag",
    "description": "LogData.Description",
    "ward": "LogData.Ward",
    "epochcount": "LogData.EpochCount",
    "executionduration": "LogData.ExecutionDuration",
    "timezone": "LogData.Timezone",
    "requestid": "LogData.RequestId",

    # LogData.TagDetail
    "alertcode": "LogData.TagDetail.AlertCode",
    "alertlevel": "LogData.TagDetail.AlertLevel",
    "headertime": "LogData.TagDetail.HeaderTime",
    "key": "LogData.TagDetail.Key",
    "tagdetailmessage": "LogData.TagDetail.Message",
    "tagdetailrequestid": "LogData.TagDetail.RequestId",
})


def resolve_field(token: str) -> str:
    """
    Map a user-facing short name to its canonical field path.

    Unknown names pass through unchanged so fields that have no alias yet
    can still be referenced by their stored path.

    Examples:
        >>> resolve_field("Ward")
        'LogData.Ward'
        >>> resolve_field("LogData.Custom")
        'LogData.Custom'
    """
    token = token.strip()
    return FIELD_ALIASES.get(token.lower(), token)


def is_identifier_field(field_path: str) -> bool:
    return field_path in IDENTIFIER_FIELDS


def get_path(record: Optional[Mapping[str, Any]], field_path: str) -> Any:
    """
    Read a dotted path from a (possibly nested) record.

    Returns None as soon as a segment is missing or is not a mapping.
    """
    value: Any = record
    for part in field_path.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
    return value
