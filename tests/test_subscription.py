"""
Tests for subscription handles
"""
import threading

import pytest

from firebase_facades import Subscription, SubscriptionClosed


def test_deliver_calls_callback():
    seen = []
    subscription = Subscription(seen.append)

    subscription.deliver('a')
    subscription.deliver('b')

    assert seen == ['a', 'b']


def test_callback_subscription_does_not_buffer_events():
    subscription = Subscription(lambda event: None)

    for i in range(1000):
        subscription.deliver(i)

    assert subscription._events.qsize() == 0


def test_queued_events_without_callback():
    subscription = Subscription()

    subscription.deliver('a')
    subscription.deliver('b')

    assert subscription.next(timeout=1) == 'a'
    assert subscription.next(timeout=1) == 'b'


def test_cancel_calls_unsubscribe_once():
    calls = []
    subscription = Subscription()
    subscription.attach(lambda: calls.append(1))

    subscription.cancel()
    subscription.cancel()
    subscription()

    assert calls == [1]
    assert subscription.active is False


def test_attach_after_cancel_unsubscribes_immediately():
    calls = []
    subscription = Subscription()
    subscription.cancel()

    subscription.attach(lambda: calls.append(1))

    assert calls == [1]


def test_no_delivery_after_cancel():
    seen = []
    subscription = Subscription(seen.append)
    subscription.cancel()

    subscription.deliver('late')

    assert seen == []
    with pytest.raises(SubscriptionClosed):
        subscription.next(timeout=1)


def test_iteration_drains_then_stops():
    subscription = Subscription()
    for event in ('a', 'b'):
        subscription.deliver(event)
    subscription.cancel()

    assert list(subscription) == ['a', 'b']


def test_next_times_out():
    subscription = Subscription(name='quiet')
    with pytest.raises(TimeoutError):
        subscription.next(timeout=0.01)


def test_next_wakes_on_event_from_another_thread():
    subscription = Subscription()
    threading.Timer(0.05, subscription.deliver, args=('ping',)).start()

    assert subscription.next(timeout=5) == 'ping'
    subscription.cancel()


def test_raising_callback_cancels_and_records_error():
    calls = []

    def callback(event):
        raise ValueError("bad handler")

    subscription = Subscription(callback)
    subscription.attach(lambda: calls.append(1))

    subscription.deliver('x')
    subscription.deliver('y')

    assert subscription.active is False
    assert isinstance(subscription.error, ValueError)
    assert calls == [1]
    with pytest.raises(SubscriptionClosed) as excinfo:
        subscription.next(timeout=1)
    assert excinfo.value.__cause__ is subscription.error


def test_callback_may_cancel_its_own_subscription():
    holder = {}

    def callback(event):
        holder['sub'].cancel()

    subscription = Subscription(callback)
    holder['sub'] = subscription
    subscription.deliver('once')
    subscription.deliver('twice')

    assert subscription.active is False
    assert subscription.error is None
