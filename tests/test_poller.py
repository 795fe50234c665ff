"""
Tests for poll-and-diff reconciliation
"""
import asyncio

from evalmate.core.document import COLLECTIONS, QUESTIONS, SESSION, TEAMS


def _prime(store, remote):
    """Cache every collection with what the service holds"""
    for name in COLLECTIONS:
        store.reconcile(name, remote.document[name])


def test_tick_without_changes_is_silent(store, remote):
    """Structurally equal values → no notification"""
    _prime(store, remote)
    calls = []
    for name in COLLECTIONS:
        store.subscribe(name, lambda name=name: calls.append(name))

    changed = asyncio.run(store.poller.tick())

    assert changed == 0
    assert calls == []


def test_tick_ignores_key_order(store, remote):
    """Same session with keys in another order is not a change"""
    _prime(store, remote)
    remote.document[SESSION] = dict(reversed(list(remote.document[SESSION].items())))
    calls = []
    store.subscribe(SESSION, lambda: calls.append(1))

    asyncio.run(store.poller.tick())

    assert calls == []


def test_tick_with_change_notifies_once(store, remote):
    """One changed collection → exactly one notification for it"""
    _prime(store, remote)
    remote.document[TEAMS] = [{"id": "a", "name": "Alpha", "groupNumber": 1}]
    calls = []
    for name in COLLECTIONS:
        store.subscribe(name, lambda name=name: calls.append(name))

    changed = asyncio.run(store.poller.tick())

    assert changed == 1
    assert calls == [TEAMS]
    assert store.get(TEAMS) == [{"id": "a", "name": "Alpha", "groupNumber": 1}]


def test_tick_failure_is_swallowed(store, remote):
    """Service down → tick returns quietly and cache is kept"""
    _prime(store, remote)
    remote.online = False
    calls = []
    store.subscribe(QUESTIONS, lambda: calls.append(1))

    assert asyncio.run(store.poller.tick()) == 0
    assert calls == []


def test_listener_error_does_not_break_tick(store, remote):
    """A raising listener does not stop the other collections"""
    _prime(store, remote)
    remote.document[TEAMS] = [{"id": "a"}]
    remote.document[QUESTIONS] = [{"id": "q"}]

    def broken():
        raise RuntimeError("view crashed")

    store.subscribe(TEAMS, broken)
    asyncio.run(store.poller.tick())

    assert store.get(QUESTIONS) == [{"id": "q"}]


def test_start_is_idempotent_and_restartable(store):
    """Second start is a no-op; stop permits a later start"""
    async def run():
        poller = store.poller
        poller.start()
        first_task = poller._task
        poller.start()
        same_task = poller._task is first_task

        poller.stop()
        await asyncio.sleep(0)
        stopped = not poller.running

        poller.start()
        restarted = poller.running
        poller.stop()
        return same_task, stopped, restarted

    assert asyncio.run(run()) == (True, True, True)


def test_running_poller_picks_up_remote_change(store, remote):
    """Background loop delivers a notification without explicit ticks"""
    async def run():
        _prime(store, remote)
        seen = asyncio.Event()
        store.subscribe(TEAMS, seen.set)
        store.start_polling()
        remote.document[TEAMS] = [{"id": "late"}]
        await asyncio.wait_for(seen.wait(), timeout=1.0)
        store.stop_polling()
        return store.get(TEAMS)

    assert asyncio.run(run()) == [{"id": "late"}]


def test_close_stops_polling(store):
    """Disposal cancels periodic work"""
    async def run():
        store.start_polling()
        await store.close()
        return store.poller.running

    assert asyncio.run(run()) is False
