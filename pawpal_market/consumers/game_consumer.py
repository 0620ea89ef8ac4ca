"""
RabbitMQ Consumer for game.points.earned events
"""
import json
import sys

import pika
import structlog

from pawpal_market.config import settings
from pawpal_market.database import SessionLocal
from pawpal_market.services.points_service import PointsService

logger = structlog.get_logger(__name__)


def handle_message(body: bytes) -> bool:
    """
    Process one game points event in its own session
    
    Returns:
        True if the message should be acked
    """
    event = json.loads(body)
    db = SessionLocal()
    try:
        return PointsService(db).process_game_points_event(event)
    finally:
        db.close()


def callback(ch, method, properties, body):
    """
    Callback function to process game points events
    
    Args:
        ch: Channel
        method: Method
        properties: Properties
        body: Message body (JSON string)
    """
    try:
        if handle_message(body):
            ch.basic_ack(delivery_tag=method.delivery_tag)
        else:
            # Reject and don't requeue (send to DLQ if configured)
            ch.basic_nack(delivery_tag=method.delivery_tag, requeue=False)
    except json.JSONDecodeError as e:
        logger.warning("game_event_invalid_json", error=str(e))
        ch.basic_nack(delivery_tag=method.delivery_tag, requeue=False)
    except Exception:
        logger.exception("game_event_processing_failed")
        ch.basic_nack(delivery_tag=method.delivery_tag, requeue=False)


def start_consumer():
    """
    Start RabbitMQ consumer
    
    Connects to RabbitMQ and starts consuming game points events
    """
    connection = None
    try:
        logger.info("consumer_connecting", rabbitmq_url=settings.RABBITMQ_URL)
        connection = pika.BlockingConnection(
            pika.URLParameters(settings.RABBITMQ_URL)
        )
        channel = connection.channel()
        
        channel.exchange_declare(
            exchange=settings.RABBITMQ_EXCHANGE,
            exchange_type='topic',
            durable=True
        )
        channel.queue_declare(
            queue=settings.RABBITMQ_GAME_QUEUE,
            durable=True
        )
        channel.queue_bind(
            exchange=settings.RABBITMQ_EXCHANGE,
            queue=settings.RABBITMQ_GAME_QUEUE,
            routing_key=settings.RABBITMQ_GAME_ROUTING_KEY
        )
        
        # Set prefetch count (QoS)
        channel.basic_qos(prefetch_count=10)
        
        channel.basic_consume(
            queue=settings.RABBITMQ_GAME_QUEUE,
            on_message_callback=callback,
            auto_ack=False  # Manual acknowledgement
        )
        
        logger.info(
            "consumer_started",
            queue=settings.RABBITMQ_GAME_QUEUE,
            routing_key=settings.RABBITMQ_GAME_ROUTING_KEY
        )
        channel.start_consuming()
        
    except KeyboardInterrupt:
        logger.info("consumer_stopped")
        if connection is not None and connection.is_open:
            connection.close()
        sys.exit(0)
    except Exception:
        logger.exception("consumer_failed")
        sys.exit(1)
