"""
RabbitMQ Event Publisher
"""
from typing import Dict, Optional

import pika
import structlog

from pawpal_market.config import settings
from pawpal_market.schemas.order import OrderEvent

logger = structlog.get_logger(__name__)


class EventPublisher:
    """Publisher for sending order events to RabbitMQ"""
    
    def __init__(
        self,
        rabbitmq_url: Optional[str] = None,
        exchange: Optional[str] = None,
        enabled: Optional[bool] = None,
    ):
        self.rabbitmq_url = rabbitmq_url or settings.RABBITMQ_URL
        self.exchange = exchange or settings.RABBITMQ_EXCHANGE
        self.enabled = settings.EVENTS_ENABLED if enabled is None else enabled
    
    def publish_order_created(self, order_data: Dict) -> bool:
        """
        Publish OrderCreated event to RabbitMQ
        
        Args:
            order_data: Order data to publish
        
        Returns:
            True if published successfully, False otherwise
        """
        return self._publish("OrderCreated", settings.RABBITMQ_ORDER_CREATED_KEY, order_data, mandatory=True)
    
    def publish_order_status_changed(self, order_data: Dict) -> bool:
        """
        Publish OrderStatusChanged event to RabbitMQ
        
        Args:
            order_data: Order data including old and new status
        
        Returns:
            True if published successfully, False otherwise
        """
        return self._publish("OrderStatusChanged", settings.RABBITMQ_ORDER_STATUS_KEY, order_data)
    
    def _publish(self, event_type: str, routing_key: str, data: Dict, mandatory: bool = False) -> bool:
        if not self.enabled:
            logger.debug("event_publish_skipped", event_type=event_type)
            return False
        
        event = OrderEvent(event_type=event_type, source=settings.SERVICE_NAME, data=data)
        
        try:
            connection = pika.BlockingConnection(
                pika.URLParameters(self.rabbitmq_url)
            )
            try:
                channel = connection.channel()
                
                channel.exchange_declare(
                    exchange=self.exchange,
                    exchange_type='topic',
                    durable=True
                )
                
                # Enable publisher confirms
                channel.confirm_delivery()
                
                channel.basic_publish(
                    exchange=self.exchange,
                    routing_key=routing_key,
                    body=event.model_dump_json(),
                    properties=pika.BasicProperties(
                        delivery_mode=2,  # Persistent message
                        content_type='application/json',
                        correlation_id=event.event_id
                    ),
                    mandatory=mandatory
                )
            finally:
                connection.close()
            
            logger.info("event_published", event_type=event_type, event_id=event.event_id)
            return True
        
        except pika.exceptions.UnroutableError:
            logger.warning("event_unroutable", event_type=event_type, event_id=event.event_id)
            return False
        except Exception as e:
            logger.error("event_publish_failed", event_type=event_type, event_id=event.event_id, error=str(e))
            return False
