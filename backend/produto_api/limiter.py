from slowapi import Limiter
from slowapi.util import get_remote_address

from produto_api.config import Config

# Counters are kept in memory, shared by every route of the process
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[Config.RATE_LIMIT],
    enabled=Config.RATE_LIMIT_ENABLED,
)
