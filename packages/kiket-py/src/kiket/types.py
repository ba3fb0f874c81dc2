# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation
from __future__ import annotations

import time
from enum import Enum
from typing import Callable, Mapping

Headers = Mapping[str, str]
"""Request headers as a plain name -> value mapping."""

Clock = Callable[[], float]
"""A zero-argument callable returning the current Unix time in seconds."""


def system_clock() -> float:
    """Return the current wall-clock time in seconds since the Unix epoch."""
    return time.time()


class AnchorStatus(str, Enum):
    """
    Well-known anchor lifecycle values reported by the audit service.

    Models keep ``status`` as a plain string since the service may report
    values outside this set; members compare equal to their string values.
    """

    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"
