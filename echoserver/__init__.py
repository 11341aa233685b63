"""
Echo server used as a test fixture for reqchain.

Every request is answered with its method, path, headers, query and parsed
body, as JSON or XML depending on ``Accept``.

Usage:
    python -m echoserver
"""

__version__ = "0.1.0"
