"""Authentication and authorization.

Learn: Three layers, applied in order on every protected request:
1. Authentication gate (dependencies.py) — cookie/Bearer JWT → ActorContext
2. Authorization gate (authorization.py) — admin bypass or exact permission
3. Ownership filter (ownership.py) — per-row owner checks + list narrowing

Tokens are issued by TokenIssuer (jwt.py) from an immutable TokenConfig.
"""
