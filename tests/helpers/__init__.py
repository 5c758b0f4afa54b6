"""Test helpers for the Blue Carbon registry tests.

Helpers:
    FakeClock: Controllable clock for deterministic tests
    SAMPLE_IMAGE: Evidence bytes accepted by the lifecycle controller

Usage:
    from tests.helpers import FakeClock
"""

from tests.helpers.fake_clock import FakeClock
from tests.helpers.samples import SAMPLE_IMAGE, SAMPLE_IMAGE_BASE64

__all__ = ["SAMPLE_IMAGE", "SAMPLE_IMAGE_BASE64", "FakeClock"]
