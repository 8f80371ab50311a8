"""
Hostel gate-pass tracker.

Students request exit passes, wardens and admins approve or reject them,
parents and security staff follow their status.
"""

__version__ = "0.1.0"
