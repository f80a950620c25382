import logging
import sys

log = logging.getLogger('trashMover')
# raw stderr of the tools we call, and the errors we swallow per item
errlog = logging.getLogger('trashMoverStderr')

# noise osascript prints on every dialog, harmless
BENIGN_WARNINGS = ('IMKClient subclass', 'IMKInputSession subclass')


class benignWarningFilter(logging.Filter):
    def __init__(self, substrings=BENIGN_WARNINGS):
        super().__init__()
        self.substrings = tuple(substrings)

    def filter(self, record):
        msg = record.getMessage()
        return not any(s in msg for s in self.substrings)


def _reset(logger):
    for h in logger.handlers[:]:
        logger.removeHandler(h)
        h.close()


def configure_logging(config, console=True):
    """Attach handlers for one run. Both files are truncated, like `> "$LOGFILE"`."""
    _reset(log)
    _reset(errlog)

    config.log_file.parent.mkdir(parents=True, exist_ok=True)
    config.stderr_log_file.parent.mkdir(parents=True, exist_ok=True)

    fh = logging.FileHandler(str(config.log_file), mode='w', encoding='utf-8', errors='backslashreplace')
    fh.setFormatter(logging.Formatter('%(asctime)s %(message)s'))
    log.addHandler(fh)
    if console:
        sh = logging.StreamHandler(sys.stdout)
        sh.setLevel(logging.INFO)
        sh.setFormatter(logging.Formatter('%(message)s'))
        log.addHandler(sh)
    log.setLevel(logging.DEBUG)

    eh = logging.FileHandler(str(config.stderr_log_file), mode='w', encoding='utf-8', errors='backslashreplace')
    eh.setFormatter(logging.Formatter('%(message)s'))
    eh.addFilter(benignWarningFilter())
    errlog.addHandler(eh)
    errlog.setLevel(logging.DEBUG)
    return log, errlog


def stderr_passthrough(text):
    """Forward raw stderr output line by line, the filter drops the known noise."""
    if not text:
        return
    for line in text.splitlines():
        if line.strip():
            errlog.warning(line)


def item_log(config):
    """Per-item chatter goes to INFO when verbose, DEBUG otherwise."""
    return log.info if config.verbose else log.debug
