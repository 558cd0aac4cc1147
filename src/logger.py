import logging
import logging.handlers
import sys
import os
import queue

LOG_FORMAT = '%(asctime)s [%(levelname)s] [%(threadName)s] %(message)s'


def _get_log_dir(log_dir=None) -> str:
    if log_dir is None:
        base = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        log_dir = os.path.join(base, "logs")
    os.makedirs(log_dir, exist_ok=True)
    return log_dir


def setup_logger(log_dir=None, level=logging.INFO):
    """
    Route the FileDeck logger through a queue to a rotating file and stdout.
    Hosts call this once; the library itself never installs handlers.
    Returns the started QueueListener (call .stop() on shutdown).
    """
    log_file = os.path.join(_get_log_dir(log_dir), "filedeck.log")

    # 5MB per file, 3 backups
    file_handler = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=5*1024*1024, backupCount=3, encoding='utf-8'
    )
    formatter = logging.Formatter(LOG_FORMAT)
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)

    log_queue = queue.Queue(-1)
    queue_handler = logging.handlers.QueueHandler(log_queue)

    listener = logging.handlers.QueueListener(
        log_queue, file_handler, console_handler
    )

    log.setLevel(level)
    # Drop handlers from a previous setup_logger() call
    for handler in list(log.handlers):
        if isinstance(handler, logging.handlers.QueueHandler):
            log.removeHandler(handler)
    log.addHandler(queue_handler)
    listener.start()

    return listener


# Module-level access
log = logging.getLogger("FileDeck")
