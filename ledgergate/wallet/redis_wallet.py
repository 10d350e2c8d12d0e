"""
Redis wallet for LedgerGate

Document-backed identity store: each identity is one JSON value under
``wallet:<namespace>:<label>``. A single SET replaces the whole record, so
concurrent writers to the same label resolve to last-writer-wins without
partial records.
"""

import json
import logging

import redis

from ledgergate.core.exceptions import WalletFailure
from ledgergate.core.models import Identity
from ledgergate.wallet.base import Wallet

logger = logging.getLogger(__name__)


class RedisWallet(Wallet):
    """Redis-based identity store"""

    KEY_PREFIX = "wallet:"

    BACKEND_TIMEOUTS = Wallet.BACKEND_TIMEOUTS + (redis.TimeoutError,)
    BACKEND_ERRORS = Wallet.BACKEND_ERRORS + (redis.RedisError,)

    name = "redis-wallet"

    def __init__(self, namespace: str, client: "redis.Redis | None" = None, host: str = "localhost",
                 port: int = 6379, db: int = 0, password: str = None, **kwargs):
        """
        Initialize Redis wallet

        Args:
            namespace: Wallet namespace, one per organization
            client: Existing Redis client; a new one is created when omitted
            host: Redis server host
            port: Redis server port
            db: Redis database number
            password: Redis password (if required)
            **kwargs: Additional Redis connection parameters
        """
        self.namespace = namespace

        if client is None:
            connection_params = {
                'host': host,
                'port': port,
                'db': db,
                'decode_responses': True,
                **kwargs
            }
            if password:
                connection_params['password'] = password
            client = redis.Redis(**connection_params)
            try:
                client.ping()
                logger.info(f"Connected to Redis at {host}:{port} for wallet {namespace}")
            except redis.RedisError as e:
                logger.error(f"Failed to connect to Redis: {e}")
                raise WalletFailure(f"Redis wallet {namespace} unavailable at {host}:{port}: {e}",
                                    operation="connect", label="") from e

        self.redis_client = client

    def _get_identity_key(self, label: str) -> str:
        """Get Redis key for an identity"""
        return f"{self.KEY_PREFIX}{self.namespace}:{label}"

    def _get(self, label: str) -> Identity | None:
        raw = self.redis_client.get(self._get_identity_key(label))
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return Identity.from_dict(label, json.loads(raw))

    def _put(self, label: str, identity: Identity) -> None:
        self.redis_client.set(self._get_identity_key(label), json.dumps(identity.to_dict()))
        logger.debug(f"Stored identity {label} in wallet {self.namespace}")

    def _remove(self, label: str) -> bool:
        return self.redis_client.delete(self._get_identity_key(label)) > 0

    def _list(self) -> list[str]:
        prefix = self._get_identity_key("")
        labels = []
        for key in self.redis_client.scan_iter(match=f"{prefix}*"):
            if isinstance(key, bytes):
                key = key.decode("utf-8")
            labels.append(key[len(prefix):])
        return sorted(labels)
