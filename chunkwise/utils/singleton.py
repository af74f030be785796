# file: chunkwise/chunkwise/utils/singleton.py
import threading


class SingletonMeta(type):
    """
    Metaclass that hands out one shared instance per class.

    The instance table lives on the metaclass so tests can reset it with
    ``SomeClass._instances.clear()``.
    """
    _instances = {}
    _lock = threading.Lock()

    def __call__(cls, *args, **kwargs):
        if cls not in cls._instances:
            with cls._lock:
                if cls not in cls._instances:
                    cls._instances[cls] = super(SingletonMeta, cls).__call__(*args, **kwargs)
        return cls._instances[cls]
