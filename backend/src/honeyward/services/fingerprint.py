# backend/src/honeyward/services/fingerprint.py
#
# Soft correlation key for a client. Same attribute snapshot, same key.
# Not an identity: browsers change, attackers spoof.

import hashlib
import json
from typing import Any, Mapping, Optional, Union

from honeyward.models import ClientContext

FINGERPRINT_LENGTH = 32

FINGERPRINT_FIELDS = (
    "user_agent",
    "language",
    "platform",
    "screen",
    "timezone",
    "canvas",
)


def _snapshot(attributes: Union[ClientContext, Mapping[str, Any], None]) -> dict:
    if attributes is None:
        source = {}
    elif isinstance(attributes, ClientContext):
        source = attributes.to_dict()
    else:
        source = attributes

    # Missing attributes serialize as "" so partial snapshots still hash
    return {
        name: "" if source.get(name) is None else str(source.get(name))
        for name in FINGERPRINT_FIELDS
    }


def fingerprint(
    attributes: Union[ClientContext, Mapping[str, Any], None],
    length: Optional[int] = None,
) -> str:
    length     = min(length or FINGERPRINT_LENGTH, FINGERPRINT_LENGTH)
    serialized = json.dumps(_snapshot(attributes), sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()[:length]
