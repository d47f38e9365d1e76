# tychee_core/transport/__init__.py
import os
from tychee_core.transport.transport_base import BaseTransport, TransportError
from tychee_core.transport.transport_local import LocalAdapter
from tychee_core.transport.transport_kafka import KafkaAdapter


def transport_factory(mode: str = None, brokers: str = None, enabled: bool = None):
    """
    Event mirror selection:
      - "none"  → no mirroring (events stay in the audit log only)
      - "local" → in-process pub/sub
      - "kafka" → Kafka producer
    """
    mode = (mode or os.getenv("TYCHEE_EVENT_TRANSPORT", "none")).lower()

    if mode == "none":
        return None

    if mode == "local":
        return LocalAdapter()

    if mode == "kafka":
        return KafkaAdapter(
            brokers=brokers or os.getenv("KAFKA_BROKERS", "localhost:9092"),
            enabled=enabled if enabled is not None else os.getenv("KAFKA_ENABLED", "1") == "1",
        )

    raise ValueError(f"Unknown event transport: {mode}")


__all__ = ["BaseTransport", "TransportError", "LocalAdapter", "KafkaAdapter", "transport_factory"]
