import logging
from datetime import datetime, timezone

import aio_pika
from aio_pika import ExchangeType, Message
from aio_pika.abc import AbstractExchange
from fastapi import FastAPI

from leave_portal.core.config import settings
from leave_portal.schemas.leave import LeaveDecisionMessage, LeaveStatus

logger = logging.getLogger(__name__)

RABBITMQ_EXCHANGE = "leave"
RABBITMQ_ROUTING_KEY = "leave.decided"


class DecisionPublisher:
    """
    매니저 결재 결과를 RabbitMQ exchange로 publish.
    알림 서비스가 이 메시지를 받아 신청자에게 전달한다.
    """

    def __init__(self, exchange: AbstractExchange) -> None:
        self.exchange = exchange

    async def publish(self, request_id: str, new_status: LeaveStatus) -> None:
        msg = LeaveDecisionMessage(
            requestId=request_id,
            status=new_status,
            decidedAt=datetime.now(timezone.utc),
        )
        message = Message(
            body=msg.model_dump_json().encode("utf-8"),
            content_type="application/json",
            delivery_mode=aio_pika.DeliveryMode.PERSISTENT,
        )
        await self.exchange.publish(message, routing_key=RABBITMQ_ROUTING_KEY)
        logger.info("Published leave decision: requestId=%s, status=%s", request_id, msg.status.value)


async def init_rabbitmq(app: FastAPI) -> None:
    app.state.decision_publisher = None
    url = settings.RABBITMQ_URL
    if not url:
        logger.info("RABBITMQ_URL not set, leave decision events disabled")
        return

    connection = await aio_pika.connect_robust(url)
    channel = await connection.channel()

    exchange = await channel.declare_exchange(
        RABBITMQ_EXCHANGE,
        ExchangeType.DIRECT,
        durable=True,
    )

    app.state.rabbit_connection = connection
    app.state.rabbit_channel = channel
    app.state.decision_publisher = DecisionPublisher(exchange)


async def close_rabbitmq(app: FastAPI) -> None:
    connection = getattr(app.state, "rabbit_connection", None)
    if connection:
        await connection.close()
