"""
backend/agenda/services/events.py

Event emitter: pushes booking events to a Redis queue for downstream
consumers (notifications, analytics).

Queue:
- events:p2p: booking_created / booking_cancelled / booking_confirmed
"""

import json
import time
import logging

from redis import Redis
from redis.exceptions import RedisError

from ..redis_client import redis_client

logger = logging.getLogger(__name__)

P2P_QUEUE = "events:p2p"


def emit_event(event_type: str, payload: dict, redis: Redis | None = None) -> bool:
    """
    Emit a p2p event.

    Never raises: a failed push is logged and reported as False.
    No Redis configured → no-op (False).
    """
    client = redis if redis is not None else redis_client
    if client is None:
        logger.debug(f"Event {event_type} not emitted: redis disabled")
        return False

    event = {
        "type": event_type,
        **payload,
        "ts": int(time.time()),
    }
    try:
        client.rpush(P2P_QUEUE, json.dumps(event))
        logger.info(f"Event emitted: {event_type} → {P2P_QUEUE}")
        return True
    except RedisError as e:
        logger.error(f"Failed to emit event {event_type}: {e}")
        return False
