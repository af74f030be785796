import threading

from chunkwise.utils.singleton import SingletonMeta


class _Counter(metaclass=SingletonMeta):
    created = 0

    def __init__(self):
        type(self).created += 1


def test_one_instance_across_threads():
    SingletonMeta._instances.pop(_Counter, None)
    results = []
    threads = [threading.Thread(target=lambda: results.append(_Counter())) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert len({id(instance) for instance in results}) == 1
    assert _Counter.created == 1
