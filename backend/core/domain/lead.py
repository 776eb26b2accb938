"""Lead domain values."""

from enum import StrEnum


class LeadStatus(StrEnum):
    """Lead pipeline status.

    ``new -> contacted -> converted`` and ``new|contacted -> lost``. Only the
    checkout webhook moves a lead to ``converted``, and nothing moves it back.
    """

    NEW = "new"
    CONTACTED = "contacted"
    CONVERTED = "converted"
    LOST = "lost"
