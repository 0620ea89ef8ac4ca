#!/usr/bin/env python
"""
Script to run the RabbitMQ game rewards consumer
"""
from pawpal_market.config import settings
from pawpal_market.consumers.game_consumer import start_consumer
from pawpal_market.database import init_db
from pawpal_market.logging_config import configure_logging

if __name__ == "__main__":
    configure_logging(settings.LOG_LEVEL)
    init_db()
    start_consumer()
