"""
Shared slowapi limiter.

Keyed by client address; individual routes opt in with @limiter.limit(...)
and must accept a `request: Request` argument.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

# Resume uploads per client address
UPLOAD_LIMIT = "30/minute"
