"""Attendance Engine package.

Organized by feature modules (attendance, scheduler, overtime, corrections, ...)
around a thin Flask controller layer and service/repository layers.
"""
