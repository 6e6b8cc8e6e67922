"""Device description sent with token acquisition"""
import hashlib
import json
import platform
from importlib import metadata
from typing import Any, Dict, Optional


def get_app_version() -> str:
    try:
        return metadata.version("authflow")
    except metadata.PackageNotFoundError:
        return "unknown"


def generate_device_fingerprint(info: Dict[str, Any]) -> str:
    """SHA-256 over the sorted device characteristics"""
    source = json.dumps(info, sort_keys=True)
    return hashlib.sha256(source.encode("utf-8")).hexdigest()


def get_device_info(device_id: Optional[str] = None) -> Dict[str, Any]:
    """Describe the current device

    Args:
        device_id: Stable identifier assigned by the caller; a fingerprint of
            the host characteristics is used when omitted
    """
    info = {
        "model": platform.machine() or "unknown",
        "platform": platform.system().lower() or "unknown",
        "osVersion": platform.release() or "unknown",
        "appVersion": get_app_version(),
    }
    info["deviceId"] = device_id or generate_device_fingerprint({**info, "node": platform.node()})
    return info
