"""Timetable Tracker: weekly activity timetables with completion tracking."""
