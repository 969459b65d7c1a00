"""Madrasti package.

Weekly lesson plans and attendance for many schools. The package is organized by
feature modules (students, schedules, plans, attendance, ...) on top of a
per-school synchronized store, with a thin Flask controller layer.
"""
