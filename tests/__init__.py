"""
Test suite for the Clinic Scheduling API.

Contains unit and integration tests for booking, querying and access control.
"""
import os

# Set environment for testing
os.environ["TESTING"] = "1"
