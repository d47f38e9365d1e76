import logging
from typing import Optional, Any
from tychee_core.transport.transport_base import BaseTransport, TransportError

log = logging.getLogger("tychee.transport.kafka")


class KafkaAdapter(BaseTransport):
    """
    Event mirror adapter.

    • Producer-only
    • Event topic == Kafka topic
    • Key == principal, so one principal's events stay ordered per partition
    """

    name = "kafka"

    def __init__(self, brokers="localhost:9092", enabled=True):
        self.brokers = brokers
        self.enabled = enabled
        self._producer = None

        if not self.enabled:
            log.warning("[KAFKA] disabled")
            return

        try:
            from kafka import KafkaProducer

            self._producer = KafkaProducer(
                bootstrap_servers=self.brokers,
                linger_ms=5,
                acks="all",
            )

            log.info(f"[KAFKA] connected brokers={self.brokers}")

        except Exception:
            log.exception("[KAFKA] init failed, disabling transport")
            self.enabled = False

    def publish(
        self,
        topic: str,
        payload: bytes | dict,
        headers=None,
        key: Optional[str] = None,
    ) -> Any:
        if not self.enabled:
            log.info(f"[KAFKA-SKIP] {topic}")
            return

        data = self.to_bytes(payload)

        log.info({
            "event": "event_mirror",
            "transport": "kafka",
            "topic": topic,
            "bytes": len(data),
        })

        try:
            self._producer.send(
                topic,
                value=data,
                key=key.encode("utf-8") if key else None,
                headers=[(k, v.encode("utf-8")) for k, v in (headers or {}).items()],
            )
            self._producer.flush(timeout=1.0)
            log.debug(f"[KAFKA PUB] topic={topic}")

        except Exception as e:
            raise TransportError(f"kafka publish to {topic} failed: {e}") from e

    def close(self) -> None:
        if self._producer is not None:
            self._producer.close()
