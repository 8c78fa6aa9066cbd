import json
import logging
from typing import Optional

from aiokafka import AIOKafkaProducer

from laburoya.core.event.publisher import EventPublisher

logger = logging.getLogger(__name__)


def partition_key(event: dict) -> Optional[bytes]:
    """Los mensajes de un mismo chat (o los cambios de un mismo match) van a la misma partición."""
    data = event.get("data") or {}
    key = data.get("chat_id") or data.get("id")
    return key.encode("utf-8") if key else None


class KafkaProducer(EventPublisher):
    """Publicador de eventos de dominio sobre aiokafka. El cliente se crea al arrancar."""

    def __init__(self, bootstrap_servers: str, client_id: str = "laburoya-api"):
        self.bootstrap_servers = bootstrap_servers
        self.client_id = client_id
        self.producer: Optional[AIOKafkaProducer] = None

    async def start(self):
        if self.producer is not None:
            return
        producer = AIOKafkaProducer(
            bootstrap_servers=self.bootstrap_servers,
            client_id=self.client_id,
            value_serializer=lambda v: json.dumps(v).encode("utf-8")
        )
        await producer.start()
        self.producer = producer
        logger.info(f"Kafka producer connected to {self.bootstrap_servers}")

    async def stop(self):
        if self.producer is not None:
            await self.producer.stop()
            self.producer = None

    async def send_event(self, topic: str, event: dict):
        if self.producer is None:
            await self.start()
        await self.producer.send_and_wait(topic, event, key=partition_key(event))
        logger.info(f"Event {event['type']} sent to {topic}")
