"""Tuition System package.

This package is organized by feature modules (timetable, appointments, attendance,
analytics, ...) with a thin Flask controller layer and service/repository layers.
"""
