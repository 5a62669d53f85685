import pytest

from fooddlv.pubsub import (
    CHAN_NOTE_CREATED,
    LocalPubSub,
    Message,
    SubscriptionClosed,
)


@pytest.fixture
def hub():
    with LocalPubSub() as pubsub:
        yield pubsub


def test_every_subscriber_receives_in_order(hub):
    first = hub.subscribe("OrderCreated")
    second = hub.subscribe("OrderCreated")
    m1, m2 = Message(1), Message(2)
    hub.publish("OrderCreated", m1)
    hub.publish("OrderCreated", m2)
    for sub in (first, second):
        assert sub.get(timeout=2) is m1
        assert sub.get(timeout=2) is m2


def test_publish_sets_channel(hub):
    sub = hub.subscribe(CHAN_NOTE_CREATED)
    hub.publish(CHAN_NOTE_CREATED, Message({"id": 10}))
    received = sub.get(timeout=2)
    assert received.channel == "ChanNoteCreated"
    assert received.data == {"id": 10}
    assert str(received) == "Message ChanNoteCreated"


def test_other_channel_not_delivered(hub):
    sub = hub.subscribe("a")
    hub.publish("b", Message(1))
    with pytest.raises(TimeoutError):
        sub.get(timeout=0.2)


def test_closed_subscription_stops_receiving(hub):
    kept = hub.subscribe("c")
    dropped = hub.subscribe("c")
    dropped.close()
    hub.publish("c", Message("x"))
    assert kept.get(timeout=2).data == "x"
    with pytest.raises(SubscriptionClosed):
        dropped.get(timeout=0.2)
    with pytest.raises(SubscriptionClosed):
        dropped.get(timeout=0.2)


def test_iteration_ends_on_close(hub):
    sub = hub.subscribe("d")
    hub.publish("d", Message(1))
    hub.publish("d", Message(2))
    assert sub.get(timeout=2).data == 1
    assert sub.get(timeout=2).data == 2
    sub.close()
    assert list(sub) == []


def test_publish_after_close_raises():
    pubsub = LocalPubSub()
    pubsub.close()
    with pytest.raises(RuntimeError):
        pubsub.publish("x", Message(1))


def test_message_has_id_and_utc_time():
    message = Message("payload")
    assert message.id.isdigit()
    assert message.created_at.utcoffset().total_seconds() == 0
    assert message.channel == ""