from __future__ import annotations

import re

from .config import VIA_SUFFIX

_VIA_SUFFIX_RE = re.compile(re.escape(VIA_SUFFIX), flags=re.IGNORECASE)


def derive_device_id(description: str) -> str:
    """
    Turn a device description into the token the delete URL expects.

    Steps, in order:
      - every '.' becomes '%23'
      - ' via Home Assistant' is removed (any casing)
      - the whole thing is lower-cased

    Apply once per description; the output is not meant to be fed back in.
      'Kitchen.Sensor'                 -> 'kitchen%23sensor'
      'Office Lamp via Home Assistant' -> 'office lamp'
    """
    if not description:
        return ""
    token = description.replace(".", "%23")
    token = _VIA_SUFFIX_RE.sub("", token)
    return token.lower()
