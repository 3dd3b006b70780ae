from __future__ import annotations

import threading

from .models import AttendanceRecord, RatingRecord

_ratings: list[RatingRecord] = []
_attendance: list[AttendanceRecord] = []
_lock = threading.Lock()


def record_rating(record: RatingRecord) -> None:
    with _lock:
        _ratings.append(record)


def record_attendance(record: AttendanceRecord) -> None:
    with _lock:
        _attendance.append(record)


def get_user_ratings(user_id: str) -> list[RatingRecord]:
    with _lock:
        return [r for r in _ratings if r.user_id == user_id]


def get_user_attendance(user_id: str) -> list[AttendanceRecord]:
    with _lock:
        return [a for a in _attendance if a.user_id == user_id]


def get_group_ratings(group_id: str) -> list[RatingRecord]:
    with _lock:
        return [r for r in _ratings if r.group_id == group_id]


def get_group_attendance(group_id: str) -> list[AttendanceRecord]:
    with _lock:
        return [a for a in _attendance if a.group_id == group_id]


def clear_history() -> None:
    with _lock:
        _ratings.clear()
        _attendance.clear()
