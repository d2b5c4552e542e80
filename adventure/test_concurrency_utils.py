import eventlet

from concurrency_utils import atomic, atomic_many, get_lock, owner_key


def test_owner_key_and_lock_identity():
    assert owner_key('alice') == 'owner:alice'
    assert get_lock(owner_key('alice')) is get_lock('owner:alice')
    assert get_lock(owner_key('alice')) is not get_lock(owner_key('bob'))


def test_atomic_releases_on_error():
    try:
        with atomic('owner:crash'):
            raise RuntimeError('boom')
    except RuntimeError:
        pass
    # Lock must be free again
    with atomic('owner:crash'):
        pass


def test_atomic_serializes_one_owner():
    order = []

    def worker(tag):
        with atomic(owner_key('shared')):
            order.append(f'{tag}-in')
            eventlet.sleep(0.01)
            order.append(f'{tag}-out')

    pool = eventlet.GreenPool()
    for tag in ('a', 'b'):
        pool.spawn(worker, tag)
    pool.waitall()
    # No interleaving: each enter is followed by its own exit
    assert order == ['a-in', 'a-out', 'b-in', 'b-out']


def test_other_owners_do_not_wait():
    order = []

    def worker(owner):
        with atomic(owner_key(owner)):
            order.append(f'{owner}-in')
            eventlet.sleep(0.01)
            order.append(f'{owner}-out')

    pool = eventlet.GreenPool()
    for owner in ('x', 'y'):
        pool.spawn(worker, owner)
    pool.waitall()
    assert order[:2] == ['x-in', 'y-in']


def test_atomic_many_accepts_duplicates():
    with atomic_many(['owner:b', 'owner:a', 'owner:b']):
        pass
    with atomic('owner:a'):
        pass
