import redis

from marketplace.utils.retry import redis_retry
from marketplace.utils.settings import REDIS_URL
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

#compare-and-delete, runs atomically inside redis
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""


class LockService:
    """
    Checkout lock per product.

    Two buyers (or two taps of the same buyer) racing to check out the same
    listing: the first one gets the lock, the second one is told the product
    is being purchased. The lock expires on its own after ``ttl`` seconds so a
    crashed request never blocks the listing for good.
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @staticmethod
    def _key(product_id: str) -> str:
        return f"product:{product_id}:checkout"

    @redis_retry()
    def acquire_checkout_lock(self, product_id: str, owner: str, ttl: int) -> bool:
        key = self._key(product_id)
        logger.info(f"Acquire lock {key} for {owner}")
        #SET product:abc:checkout "<owner>" NX EX 120
        return bool(self.redis.set(name=key, value=owner, nx=True, ex=ttl))

    @redis_retry()
    def release_checkout_lock(self, product_id: str, owner: str) -> bool:
        key = self._key(product_id)
        logger.info(f"Release lock {key} for {owner}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, owner)
        return bool(res)
