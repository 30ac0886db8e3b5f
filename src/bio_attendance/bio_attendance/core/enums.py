from __future__ import annotations

from enum import Enum


class ShiftType(str, Enum):
    """Loại ca được gán cho nhân viên."""

    MORNING = "morning"
    AFTERNOON = "afternoon"
    NIGHT = "night"
    GRAVEYARD = "graveyard"
    UTILITY_24H = "utility_24h"


class ShiftFamily(str, Enum):
    """How a shift's time-out relates to its time-in calendar day."""

    SAME_DAY = "same_day"
    NEXT_DAY = "next_day"
    GRAVEYARD = "graveyard"


class Slot(str, Enum):
    TIME_IN = "time_in"
    TIME_OUT = "time_out"


class ScanMode(str, Enum):
    """Device punch mode. Most exports only say FP (fingerprint, in or out)."""

    UNSPECIFIED = "unspecified"
    IN = "in"
    OUT = "out"


class AttendanceStatus(str, Enum):
    """Trạng thái chấm công chuẩn hoá lưu trong CSDL."""

    ON_TIME = "on_time"
    TARDY = "tardy"
    HALF_DAY = "half_day"
    FAILED_BIO_IN = "failed_bio_in"
    FAILED_BIO_OUT = "failed_bio_out"
    NCNS = "ncns"
    ADVISED_ABSENCE = "advised_absence"
    UNDERTIME = "undertime"


FLAGGED_STATUSES = frozenset(
    {
        AttendanceStatus.HALF_DAY,
        AttendanceStatus.NCNS,
        AttendanceStatus.FAILED_BIO_IN,
        AttendanceStatus.FAILED_BIO_OUT,
        AttendanceStatus.UNDERTIME,
    }
)


class MatchOutcome(str, Enum):
    RESOLVED = "resolved"
    AMBIGUOUS = "ambiguous"
    UNMATCHED = "unmatched"


class ReviewReason(str, Enum):
    """Why a raw scan could not be reconciled automatically."""

    AMBIGUOUS_NAME = "ambiguous_name"
    UNMATCHED_NAME = "unmatched_name"
    OUT_OF_WINDOW = "out_of_window"
    NO_ASSIGNMENT = "no_assignment"
    MERGE_CONFLICT = "merge_conflict"
