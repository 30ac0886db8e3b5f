"""Parser for biometric device exports.

Expected columns: No, DevNo, UserId, Name, Mode, DateTime. Rows are tab
separated; some devices pad with spaces instead.

    No	DevNo	UserId	Name	Mode	DateTime
    1	1	17	Cabarliza A	FP	2024-03-04 07:55:12
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import List, Optional, Tuple

from ..core.enums import ScanMode
from ..core.exceptions import IngestionError
from .model import ParsedFile, RawScan

logger = logging.getLogger(__name__)

EXPECTED_COLUMNS = 6

_CONTROL = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_WIDE_GAP = re.compile(r" {2,}")
_DATETIME = re.compile(r"(\d{4}-\d{2}-\d{2})\s+(\d{1,2}:\d{2}:\d{2})")

_MODES = {
    "in": ScanMode.IN,
    "c/in": ScanMode.IN,
    "checkin": ScanMode.IN,
    "check in": ScanMode.IN,
    "out": ScanMode.OUT,
    "c/out": ScanMode.OUT,
    "checkout": ScanMode.OUT,
    "check out": ScanMode.OUT,
}


def decode_bytes(data: bytes) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        return data.decode("cp1252", errors="replace")


def parse_mode(value: str) -> ScanMode:
    return _MODES.get(value.strip().lower(), ScanMode.UNSPECIFIED)


def parse_timestamp(value: str) -> Optional[datetime]:
    m = _DATETIME.search(value)
    if not m:
        return None
    try:
        return datetime.strptime(f"{m.group(1)} {m.group(2)}", "%Y-%m-%d %H:%M:%S")
    except ValueError:
        return None


def _split(line: str) -> List[str]:
    cols = [c.strip() for c in line.split("\t")]
    if len(cols) >= EXPECTED_COLUMNS:
        return cols
    cols = [c.strip() for c in _WIDE_GAP.split(line.strip())]
    # "2024-03-04  07:55:12" splits into two columns on a wide gap.
    if len(cols) == EXPECTED_COLUMNS + 1 and _DATETIME.search(f"{cols[-2]} {cols[-1]}"):
        cols = cols[:-2] + [f"{cols[-2]} {cols[-1]}"]
    return cols


class AttendanceFileParser:
    def parse_bytes(self, data: bytes) -> ParsedFile:
        if data is None:
            raise IngestionError("Attendance file is unreadable")
        return self.parse_text(decode_bytes(data))

    def parse_file(self, path) -> ParsedFile:
        try:
            with open(path, "rb") as fh:
                data = fh.read()
        except OSError as exc:
            raise IngestionError(f"Cannot read attendance file {path}: {exc}") from exc
        return self.parse_bytes(data)

    def parse_text(self, text: str) -> ParsedFile:
        scans: List[RawScan] = []
        warnings: List[str] = []

        lines = _CONTROL.sub("", text.replace("\r\n", "\n").replace("\r", "\n")).split("\n")
        header_seen = False
        for line_no, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            if not header_seen:
                header_seen = True
                if not _DATETIME.search(line):
                    continue

            scan, problem = self._parse_line(line, line_no)
            if problem:
                warnings.append(problem)
                logger.warning(problem)
                continue
            scans.append(scan)

        return ParsedFile(scans=scans, warnings=warnings)

    def _parse_line(self, line: str, line_no: int) -> Tuple[Optional[RawScan], Optional[str]]:
        cols = _split(line)
        if len(cols) < EXPECTED_COLUMNS:
            return None, f"line {line_no}: expected {EXPECTED_COLUMNS} columns, got {len(cols)}"

        _, device_id, user_id, name, mode, stamp = cols[:EXPECTED_COLUMNS]
        if not name:
            return None, f"line {line_no}: empty name"

        timestamp = parse_timestamp(stamp)
        if timestamp is None:
            return None, f"line {line_no}: unparseable datetime {stamp!r}"

        return (
            RawScan(
                device_id=device_id,
                raw_name=name,
                mode=parse_mode(mode),
                timestamp=timestamp,
                user_id=user_id or None,
                line_no=line_no,
            ),
            None,
        )
