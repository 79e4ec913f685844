import redis

from dawazon.utils.retry import redis_retry
from dawazon.utils.settings import REDIS_URL, CART_LOCK_TTL_SECONDS
from dawazon.utils.logging import get_logger

logger = get_logger(__name__)

#LUA porownaj i usun, atomicity
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#redis wykonuje skrypt lua atomowo, nikt nie wcisnie sie miedzy GET a DEL
#wiec lock zdejmuje tylko ten kto go zalozyl (owner token)


class LockService:
    """
    -lock na koszyk na czas jednej operacji (SET NX EX)
    -zwalnianie locka tylko przez wlasciciela
    -atomowosc przy pomocy lua
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @staticmethod
    def _key(cart_id: str) -> str:
        return f"cart:{cart_id}:lock"

    @redis_retry()
    def acquire_cart_lock(self, cart_id: str, owner: str, ttl: int = CART_LOCK_TTL_SECONDS) -> bool:
        key = self._key(cart_id)
        logger.debug("Acquire cart lock", key=key, owner=owner)
        #SET cart:<id>:lock "<owner>" NX EX 10
        return bool(
            self.redis.set(
                name=key,
                value=owner,
                nx=True, #not eXists, jak klucz juz jest to nic nie rob i None
                ex=ttl, #wygasa sam, nawet jak proces padnie w trakcie operacji
            )
        )

    @redis_retry()
    def release_cart_lock(self, cart_id: str, owner: str) -> bool:
        key = self._key(cart_id)
        logger.debug("Release cart lock", key=key, owner=owner)
        res = self.redis.eval(_RELEASE_LUA, 1, key, owner)
        return bool(res)
