"""Rate limiter shared by main.py and the routers.

Kept in its own module so routers can decorate endpoints without importing
the application.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

# Per-endpoint limits, keyed by client address
LOGIN_LIMIT = "10/minute"
REGISTER_LIMIT = "5/minute"
OTP_SEND_LIMIT = "5/minute"
OTP_VERIFY_LIMIT = "10/minute"
CONTACT_LIMIT = "5/minute"
