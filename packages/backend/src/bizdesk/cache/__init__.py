"""Redis-backed shared state — rate limit counters and the credential deny-list.

Learn: Redis is optional. When it is unreachable at startup the app keeps
running: rate limiting is skipped and the deny-list falls back to an
in-process store.
"""
