from datetime import datetime
import logging

from pydantic import BaseModel

logger = logging.getLogger(__name__)

EVENT_SOURCE = "laburoya-api"


def build_event(event_type: str, payload: BaseModel) -> dict:
    """Arma el sobre JSON de un evento de dominio."""
    return {
        "type": event_type,
        "data": payload.model_dump(mode="json"),
        "source": EVENT_SOURCE,
        "timestamp": datetime.utcnow().isoformat()
    }


class EventPublisher:
    """Destino de los eventos de dominio. La implementación base los descarta."""

    async def start(self):
        pass

    async def stop(self):
        pass

    async def send_event(self, topic: str, event: dict):
        logger.debug(f"Event {event['type']} discarded, no broker configured")


async def publish_quietly(publisher: EventPublisher, topic: str, event: dict) -> None:
    """
    Publica un evento después de que la escritura ya quedó confirmada.
    Un fallo del broker se registra y no se propaga a la petición.
    """
    try:
        await publisher.send_event(topic, event)
    except Exception as e:
        logger.error(f"Could not publish {event['type']} to {topic}: {str(e)}", exc_info=True)


def build_event_publisher(settings) -> EventPublisher:
    if settings.KAFKA_ENABLED:
        from laburoya.core.event.kafka.producer import KafkaProducer
        return KafkaProducer(settings.KAFKA_BOOTSTRAP_SERVERS, client_id=settings.KAFKA_CLIENT_ID)
    return EventPublisher()
