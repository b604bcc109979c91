"""SlowAPI rate limiter shared by main (app.state.limiter) and route modules.

Limits are keyed by client address. Route functions decorated with these
must accept a `request: Request` parameter.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

LOGIN_LIMIT = "10/minute"
WRITE_ENDPOINT_LIMIT = "120/minute"
ADMIN_WRITE_LIMIT = "30/minute"

limit_auth = limiter.limit(LOGIN_LIMIT)
limit_writes = limiter.limit(WRITE_ENDPOINT_LIMIT)
limit_admin_writes = limiter.limit(ADMIN_WRITE_LIMIT)
