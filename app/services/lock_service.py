import threading
import uuid

import redis

from app.utils.retry import redis_retry
from app.utils.settings import REDIS_URL, LOCK_BACKEND, CART_LOCK_TTL_SECONDS
from app.utils.logging import get_logger

logger = get_logger(__name__)

#LUA porownaj i usun, atomicity
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#redis wykonuje atomowo przez lua, skrypt dziala jako jedna nieprzerywalna operacja
#nie mozna wcisnac sie miedzy GET a DEL, wiec tu jest get + porownanie + del wszystko naraz


def new_lock_token() -> str:
    return uuid.uuid4().hex


def _cart_key(customer_id: int) -> str:
    return f"cart:{customer_id}:lock"


class LockService:
    """
    -blokada koszyka klienta (serializacja operacji na jednym koszyku)
    -zwalnianie locka tylko przez wlasciciela tokena
    -atomowosc przy pomocy lua
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )

    @redis_retry()
    def acquire_cart_lock(self, customer_id: int, token: str, ttl: int = CART_LOCK_TTL_SECONDS) -> bool:
        key = _cart_key(customer_id)
        logger.debug(f"Acquire lock {key}")
        #SET cart:1:lock "<token>" NX EX 30
        return bool(
            self.redis.set(
                name=key,
                value=token,
                nx=True, #tylko jesli klucz nie istnieje, nie czekamy
                ex=ttl, #wygasa sam jesli proces padnie w trakcie operacji
            )
        )

    @redis_retry()
    def release_cart_lock(self, customer_id: int, token: str) -> bool:
        key = _cart_key(customer_id)
        logger.debug(f"Release lock {key}")
        res = self.redis.eval(_RELEASE_LUA, 1, key, token)
        return bool(res)


class LocalLockService:
    """
    Ten sam kontrakt co LockService, ale w pamieci procesu.
    Dla jednego procesu (dev, testy) - nie chroni miedzy procesami.
    TTL ignorowany, lock zyje do release.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._owners: dict[int, str] = {}

    def acquire_cart_lock(self, customer_id: int, token: str, ttl: int = CART_LOCK_TTL_SECONDS) -> bool:
        with self._guard:
            if customer_id in self._owners:
                return False
            self._owners[customer_id] = token
            return True

    def release_cart_lock(self, customer_id: int, token: str) -> bool:
        with self._guard:
            if self._owners.get(customer_id) != token:
                return False
            del self._owners[customer_id]
            return True

    def is_locked(self, customer_id: int) -> bool:
        with self._guard:
            return customer_id in self._owners


_lock_service = None


def get_lock_service():
    #jeden lock service na proces, local musi byc wspoldzielony miedzy requestami
    global _lock_service
    if _lock_service is None:
        _lock_service = LocalLockService() if LOCK_BACKEND == "local" else LockService()
        logger.info(f"Lock backend: {LOCK_BACKEND}")
    return _lock_service
