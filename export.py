"""JSON export functionality.

Exports collected records to JSON format with metadata.
Derived values (interface status, route type) are written alongside the
stored fields so consumers never have to recompute them.
"""

import dataclasses
import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import config
from models import InterfaceRecord, NetworkSnapshot
from utils import detect_platform


def to_jsonable(value: Any) -> Any:
    """Convert records (and containers of records) to JSON-ready values.

    Args:
        value: Dataclass, enum, sequence, mapping or scalar

    Returns:
        Structure of dicts, lists and scalars.
    """
    if isinstance(value, Enum):
        return value.value
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        data = {
            f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)
        }
        if isinstance(value, InterfaceRecord):
            data["status"] = value.status.value
        return data
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    return value


def _record_count(data: Any) -> int:
    if isinstance(data, (list, tuple)):
        return len(data)
    return 1 if data is not None else 0


def export_to_json(command: str, data: Any, indent: int = 2) -> str:
    """Export one command's result to JSON format with metadata.

    Args:
        command: CLI command that produced data
        data: Records (a list, a single record or a NetworkSnapshot)
        indent: JSON indentation (default 2)

    Returns:
        JSON string with metadata and data.
    """
    metadata: dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "tool": config.TOOL_NAME,
        "version": config.VERSION,
        "platform": detect_platform().value,
        "command": command,
    }

    if isinstance(data, NetworkSnapshot):
        metadata["summary"] = {
            "interface_count": len(data.interfaces),
            "route_count": len(data.routes),
            "connection_count": data.connections.total if data.connections else 0,
            "failed_domains": sorted(data.errors),
        }
    else:
        metadata["record_count"] = _record_count(data)

    output = {
        "metadata": metadata,
        "data": to_jsonable(data),
    }

    return json.dumps(output, indent=indent)
