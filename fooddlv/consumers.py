"""Background consumers reacting to events published on the hub."""

from __future__ import annotations

import functools
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional, Sequence

from fooddlv.asyncjob import Group, Job
from fooddlv.pubsub import CHAN_NOTE_CREATED, Channel, Message, Subscription

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConsumerJob:
    """A named handler run for every message of a topic."""

    title: str
    handler: Callable[[Message], None]


def send_notification_after_create_note(app_ctx: Any) -> ConsumerJob:
    def handle(message: Message) -> None:
        logger.info("SendNotificationAfterCreateNote %s", message.data)

    return ConsumerJob("Send notification after create note", handle)


def send_email_after_create_note(app_ctx: Any) -> ConsumerJob:
    def handle(message: Message) -> None:
        logger.info("SendEmailAfterCreateNote %s", message.data)

    return ConsumerJob("Send email after create note", handle)


def _listen(subscription: Subscription, handle: Callable[[Message], None]) -> None:
    thread = threading.Thread(
        target=lambda: [handle(message) for message in subscription],
        name=f"consumer-{subscription.channel}",
        daemon=True,
    )
    thread.start()


def run_send_notification_after_create_note(app_ctx: Any) -> Subscription:
    """Log every created note; close the returned subscription to stop."""
    subscription = app_ctx.pubsub.subscribe(CHAN_NOTE_CREATED)
    _listen(subscription, lambda message: logger.info("%s", message.data))
    return subscription


def run_delete_image_record_after_create_note(app_ctx: Any) -> Subscription:
    """Log the image ids of every created note; close the subscription to stop."""
    subscription = app_ctx.pubsub.subscribe(CHAN_NOTE_CREATED)

    def handle(message: Message) -> None:
        get_image_ids = getattr(message.data, "get_image_ids", None)
        if callable(get_image_ids):
            logger.info("%s", get_image_ids())

    _listen(subscription, handle)
    return subscription


def _run_consumer(consumer: ConsumerJob, message: Message) -> None:
    logger.info("running job for %s. Value: %s", consumer.title, message.data)
    consumer.handler(message)


class ConsumerEngine:
    """Runs a group of consumer jobs for every message on their topic."""

    def __init__(
        self,
        app_ctx: Any,
        consumers: Optional[Iterable[ConsumerJob]] = None,
        *,
        is_parallel: bool = False,
        retries: Optional[Sequence[float]] = None,
        stop_timeout: Optional[float] = 5.0,
    ) -> None:
        self.app_ctx = app_ctx
        self.consumers = (
            list(consumers)
            if consumers is not None
            else [
                send_notification_after_create_note(app_ctx),
                send_email_after_create_note(app_ctx),
            ]
        )
        self.is_parallel = is_parallel
        self.retries = list(retries) if retries is not None else None
        self.stop_timeout = stop_timeout
        self._subscriptions: list[Subscription] = []
        self._threads: list[threading.Thread] = []

    def start(self) -> None:
        self._start_sub_topic(CHAN_NOTE_CREATED, self.is_parallel, self.consumers)

    def _start_sub_topic(
        self, topic: Channel, is_parallel: bool, consumers: Sequence[ConsumerJob]
    ) -> None:
        subscription = self.app_ctx.pubsub.subscribe(topic)
        for consumer in consumers:
            logger.info("Setup consumer for: %s", consumer.title)
        thread = threading.Thread(
            target=self._consume,
            args=(subscription, is_parallel, list(consumers)),
            name=f"engine-{topic}",
            daemon=True,
        )
        self._subscriptions.append(subscription)
        self._threads.append(thread)
        thread.start()

    def _consume(
        self, subscription: Subscription, is_parallel: bool, consumers: list[ConsumerJob]
    ) -> None:
        for message in subscription:
            jobs = [
                Job(functools.partial(_run_consumer, consumer, message), retries=self.retries)
                for consumer in consumers
            ]
            try:
                Group(is_parallel, *jobs).run()
            except Exception:
                logger.exception("consumer group failed")

    def stop(self) -> None:
        """Unsubscribe and wait for the current group to finish."""
        for subscription in self._subscriptions:
            subscription.close()
        for thread in self._threads:
            thread.join(self.stop_timeout)
        self._subscriptions.clear()
        self._threads.clear()