"""
Clinic Scheduling API

A FastAPI-based service for booking clinic appointments, with role-based
access control and double-booking prevention per clinician.
"""

__version__ = "1.0.0"
