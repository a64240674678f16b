"""
backend/app/services/events.py

Event emitter: pushes events to a Redis queue for the staff notification
consumers.

Queue:
- events:p2p — instant delivery (new booking / cancellation notices)
"""

import json
import time
import logging

from redis.exceptions import RedisError

from .. import redis_client as redis_module

logger = logging.getLogger(__name__)

P2P_QUEUE = "events:p2p"


def emit_event(event_type: str, payload: dict) -> None:
    """
    Emit a p2p event (instant delivery).

    Pushed to Redis list `events:p2p`. Failures are logged and swallowed:
    a booking must not fail because notifications are down.
    """
    client = redis_module.redis_client
    if client is None:
        logger.debug(f"Redis not configured, event {event_type} not emitted")
        return

    event = {
        "type": event_type,
        **payload,
        "ts": int(time.time()),
    }
    try:
        client.rpush(P2P_QUEUE, json.dumps(event))
        logger.info(f"Event emitted: {event_type} → {P2P_QUEUE}")
    except RedisError as e:
        logger.error(f"Failed to emit event {event_type}: {e}")
