"""
Autosaver: debounce, сравнение с базовой точкой, ошибки
и пропуск сохранения, пока предыдущее ещё идёт.

Таймер в тестах ставится на минуту, сохранение вызывается через flush().
"""
import threading
from unittest.mock import MagicMock

from django.test import SimpleTestCase

from pages.autosave import Autosaver


class AutosaverTests(SimpleTestCase):

    def setUp(self):
        self.save = MagicMock()
        self.saver = Autosaver(self.save, delay=60)

    def tearDown(self):
        self.saver.cancel()

    def test_first_update_is_baseline(self):
        self.saver.update({'content': 'v1'})
        self.assertFalse(self.saver.flush())
        self.save.assert_not_called()

    def test_flush_saves_pending(self):
        self.saver.update({'content': 'v1'})
        self.saver.update({'content': 'v2'})
        self.assertTrue(self.saver.flush())
        self.save.assert_called_once_with({'content': 'v2'})
        self.assertIsNotNone(self.saver.last_saved)

    def test_unchanged_data_is_skipped(self):
        self.saver.update({'content': 'v1', 'title': 'A'})
        self.saver.update({'title': 'A', 'content': 'v1'})
        self.assertFalse(self.saver.flush())
        self.save.assert_not_called()

    def test_same_payload_saved_once(self):
        self.saver.update({'content': 'v1'})
        self.saver.update({'content': 'v2'})
        self.saver.flush()
        self.saver.update({'content': 'v2'})
        self.assertFalse(self.saver.flush())
        self.assertEqual(self.save.call_count, 1)

    def test_only_latest_update_is_saved(self):
        self.saver.update({'content': 'v1'})
        self.saver.update({'content': 'v2'})
        self.saver.update({'content': 'v3'})
        self.saver.flush()
        self.save.assert_called_once_with({'content': 'v3'})

    def test_cancel_drops_pending(self):
        self.saver.update({'content': 'v1'})
        self.saver.update({'content': 'v2'})
        self.saver.cancel()
        self.assertFalse(self.saver.flush())
        self.save.assert_not_called()

    def test_error_reported_and_not_retried(self):
        on_error = MagicMock()
        self.save.side_effect = RuntimeError('network down')
        saver = Autosaver(self.save, delay=60, on_error=on_error)
        saver.update({'content': 'v1'})
        saver.update({'content': 'v2'})

        with self.assertLogs('pages.autosave', level='WARNING'):
            self.assertFalse(saver.flush())
        on_error.assert_called_once()
        self.assertIsInstance(saver.error, RuntimeError)
        self.assertFalse(saver.is_saving)

        saver.update({'content': 'v2'})
        self.assertFalse(saver.flush())
        self.assertEqual(self.save.call_count, 1)

    def test_timer_fires_after_delay(self):
        saved = threading.Event()
        saver = Autosaver(lambda data: saved.set(), delay=0.01)
        saver.update({'content': 'v1'})
        saver.update({'content': 'v2'})
        self.assertTrue(saved.wait(timeout=5))

    def test_no_second_save_while_saving(self):
        started = threading.Event()
        release = threading.Event()
        calls = []

        def slow_save(data):
            calls.append(data)
            started.set()
            release.wait(timeout=5)

        saver = Autosaver(slow_save, delay=60)
        saver.update({'content': 'v1'})
        saver.update({'content': 'v2'})
        worker = threading.Thread(target=saver.flush)
        worker.start()
        self.assertTrue(started.wait(timeout=5))

        self.assertTrue(saver.is_saving)
        saver.update({'content': 'v3'})
        self.assertFalse(saver.flush())
        self.assertEqual(calls, [{'content': 'v2'}])

        release.set()
        worker.join(timeout=5)
        # Отложенные данные не теряются и уходят следующим сохранением
        self.assertTrue(saver.flush())
        self.assertEqual(calls, [{'content': 'v2'}, {'content': 'v3'}])
        saver.cancel()
