"""Kafka sink publishing session snapshots and exports."""

import json
import logging
from dataclasses import dataclass
from typing import Any

from confluent_kafka import Producer

from loan_recon.config import KafkaConfig
from loan_recon.exceptions import SinkError
from loan_recon.sinks.serialization import snapshot_to_dict, to_dict

logger = logging.getLogger(__name__)


@dataclass
class ProducerStats:
    """Track producer delivery statistics."""

    sent: int = 0
    delivered: int = 0
    failed: int = 0

    @property
    def success_rate(self) -> float:
        """Calculate success rate."""
        total = self.delivered + self.failed
        return self.delivered / total if total > 0 else 0.0


class KafkaSnapshotSink:
    """Publish snapshots keyed by session id, one message per snapshot.

    The session id as key keeps every snapshot of a session on the same
    partition, so consumers see the steps in order.
    """

    def __init__(
        self,
        config: KafkaConfig | str,
        producer: Any | None = None,
        flush_timeout: float = 10.0,
    ) -> None:
        """Initialize Kafka sink.

        Parameters
        ----------
        config : KafkaConfig | str
            Producer configuration or bootstrap servers string.
        producer : Any | None
            Pre-built producer (mostly for tests).
        flush_timeout : float
            Seconds to wait for delivery of each snapshot.
        """
        if isinstance(config, str):
            config = KafkaConfig(bootstrap_servers=config)

        self.config = config
        self.flush_timeout = flush_timeout
        self.producer = producer or Producer(config.to_dict())
        self.stats = ProducerStats()
        self._last_error: Any = None

    def _delivery_callback(self, err: Any, msg: Any) -> None:
        """Handle delivery reports."""
        if err:
            self.stats.failed += 1
            self._last_error = err
            logger.error("Delivery failed: %s", err)
        else:
            self.stats.delivered += 1
            logger.debug("Delivered to %s[%d]@%d", msg.topic(), msg.partition(), msg.offset())

    def send(self, topic: str, data: dict, key: str | None = None, headers: dict | None = None) -> None:
        """Send a single JSON message."""
        self.producer.produce(
            topic=topic,
            key=key.encode("utf-8") if key else None,
            value=json.dumps(data, ensure_ascii=False, default=str).encode("utf-8"),
            headers=headers,
            callback=self._delivery_callback,
        )
        self.stats.sent += 1
        self.producer.poll(0)

    def save(self, snapshot: Any) -> bool:
        """Publish a snapshot and wait for its delivery.

        Raises
        ------
        SinkError
            If the message is not delivered within ``flush_timeout``.
        """
        self._last_error = None
        self.send(
            self.config.topic,
            snapshot_to_dict(snapshot),
            key=snapshot.session_id,
            headers={"step": snapshot.step.value},
        )
        remaining = self.producer.flush(self.flush_timeout)
        if remaining:
            raise SinkError(f"{remaining} snapshot message(s) not delivered")
        if self._last_error is not None:
            raise SinkError(f"Snapshot delivery failed: {self._last_error}")
        return True

    def write_batch(self, entity_type: str, records: list[Any]) -> None:
        """Publish an export batch to ``<topic>.<entity_type>``."""
        topic = f"{self.config.topic}.{entity_type}"
        logger.info("Writing batch to %s: %d records", topic, len(records))
        for record in records:
            self.send(topic, to_dict(record))
        self.flush()

    def flush(self, timeout: float = 30.0) -> None:
        """Flush pending messages."""
        self.producer.flush(timeout)

    def close(self) -> None:
        """Flush and close the producer."""
        self.flush()
        logger.info(
            "Kafka sink closed: sent=%d, delivered=%d, failed=%d",
            self.stats.sent,
            self.stats.delivered,
            self.stats.failed,
        )
