"""
Shared service utilities.

- http.py - rate-limited, retrying JSON client used by every datasource
"""
