"""
Thread-safe logging для многопоточного Gunicorn (gthread).

Проблема: стандартный logging.StreamHandler может вызвать
RuntimeError: reentrant call inside <_io.BufferedWriter name='<stderr>'>
при одновременной записи из нескольких потоков.

Плюс фильтр, который не даёт markdown-контенту страниц попадать в логи
целиком: автосейв шлёт полный текст страницы каждые пару секунд.
"""
import logging
import threading

# Строки длиннее этого порога в аргументах лога заменяются на "[N chars]"
MAX_LOGGED_ARG_LENGTH = 500


class ThreadSafeStreamHandler(logging.StreamHandler):
    """
    Thread-safe версия StreamHandler.

    Использует RLock для предотвращения reentrant ошибок при
    одновременной записи из нескольких потоков.
    """

    _write_lock = threading.RLock()

    def emit(self, record):
        try:
            msg = self.format(record)
            stream = self.stream
            with self._write_lock:
                stream.write(msg + self.terminator)
                self.flush()
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)


class PageContentFilter(logging.Filter):
    """
    Урезает длинные строковые аргументы записи лога.

    Сообщение не трогаем, меняем только record.args:
    logger.info('Saving page %s: %s', page.id, page.content) →
    'Saving page 1f0...: [18342 chars]'.
    """

    def __init__(self, name='', max_length=MAX_LOGGED_ARG_LENGTH):
        super().__init__(name)
        self.max_length = max_length

    def _shorten(self, value):
        if isinstance(value, str) and len(value) > self.max_length:
            return f'[{len(value)} chars]'
        return value

    def filter(self, record):
        if isinstance(record.args, tuple):
            record.args = tuple(self._shorten(arg) for arg in record.args)
        elif isinstance(record.args, dict):
            record.args = {key: self._shorten(value) for key, value in record.args.items()}
        return True
