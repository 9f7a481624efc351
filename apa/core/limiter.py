"""Shared slowapi limiter and the per-route limits.

Routes import the decorators from here; create_app() puts the same limiter on
app.state. Clients are keyed by remote address.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

# Public forms (leads, lost pets, rescue reports) and the login proxy are the abuse targets.
limit_auth = limiter.limit("10/minute")
limit_submissions = limiter.limit("20/minute")
limit_writes = limiter.limit("120/minute")
limit_upload = limiter.limit("30/minute")
