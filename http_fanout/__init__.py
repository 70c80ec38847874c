"""
HTTP Fanout

Send one verbose HTTP request, or fan out many concurrent requests against a
single URL under an optional requests-per-second cap.
"""

__version__ = "0.1.0"
