"""
Автосейв с debounce и сравнением с последним сохранённым состоянием.

    saver = Autosaver(lambda data: client.put(url, data), delay=2.0)
    saver.update(initial)   # первый вызов задаёт базовую точку
    saver.update(edited)    # через delay секунд тишины → save(edited)

Повторно одинаковые данные не сохраняются, пока идёт сохранение
новые не запускаются. Базовая точка сдвигается и после ошибки,
чтобы один и тот же payload не уходил в цикл повторов.
"""
import json
import logging
import threading

from django.utils import timezone

logger = logging.getLogger(__name__)

DEFAULT_DELAY = 2.0


def _fingerprint(data):
    return json.dumps(data, sort_keys=True, default=str)


class Autosaver:

    def __init__(self, save, delay=DEFAULT_DELAY, on_error=None):
        self._save = save
        self.delay = delay
        self.on_error = on_error

        self._lock = threading.Lock()
        self._timer = None
        self._pending = None
        self._has_pending = False
        self._previous = None
        self._initialized = False

        self.is_saving = False
        self.last_saved = None
        self.error = None

    def update(self, data):
        """Новые данные из редактора. Перезапускает таймер."""
        with self._lock:
            if not self._initialized:
                self._initialized = True
                self._previous = _fingerprint(data)
                return
            self._pending = data
            self._has_pending = True
            self._cancel_timer()
            self._timer = threading.Timer(self.delay, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def flush(self):
        """Сохранить отложенные данные прямо сейчас, не дожидаясь таймера."""
        with self._lock:
            self._cancel_timer()
        return self._fire()

    def cancel(self):
        with self._lock:
            self._cancel_timer()
            self._pending = None
            self._has_pending = False

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _fire(self):
        with self._lock:
            if not self._has_pending or self.is_saving:
                return False
            data = self._pending
            fingerprint = _fingerprint(data)
            self._pending = None
            self._has_pending = False
            if fingerprint == self._previous:
                return False
            self.is_saving = True

        try:
            self._save(data)
        except Exception as e:
            logger.warning('Autosave failed: %s', e)
            self.error = e
            if self.on_error is not None:
                self.on_error(e)
            return False
        else:
            self.error = None
            self.last_saved = timezone.now()
            return True
        finally:
            with self._lock:
                self._previous = fingerprint
                self.is_saving = False
