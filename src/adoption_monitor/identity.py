"""Identifiers for recorded changes and for this installation."""

import hashlib
import random
import string
from datetime import datetime
from typing import Optional

from .models import utc_now


DEVICE_ID_SUFFIX_LENGTH = 9
_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


def _epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def generate_change_id(file_path: str, version: int, now: Optional[datetime] = None) -> str:
    """
    Build an opaque id for a recorded change.

    The id is the first 16 hex characters of the MD5 digest of
    ``<path>-<version>-<epoch ms>``.
    """
    moment = now or utc_now()
    data = f"{file_path}-{version}-{_epoch_ms(moment)}"
    return hashlib.md5(data.encode('utf-8')).hexdigest()[:16]


def generate_device_id(now: Optional[datetime] = None) -> str:
    """Build a new device id: ``device-<epoch ms>-<random suffix>``."""
    moment = now or utc_now()
    suffix = ''.join(random.choices(_SUFFIX_ALPHABET, k=DEVICE_ID_SUFFIX_LENGTH))
    return f"device-{_epoch_ms(moment)}-{suffix}"
