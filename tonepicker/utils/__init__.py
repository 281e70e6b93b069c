"""
Utility functions module.

Time Semantics:
- Monotonic time drives cache expiry and rate limiting windows
- Wall-clock time is only used for snapshot timestamps and log output
"""
