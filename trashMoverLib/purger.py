import time

from trashMoverLib.fileOps import TRANSIENT_ERRORS, sort_deepest_first
from trashMoverLib.logSink import log, errlog, item_log
from trashMoverLib.verify import remaining_entries, log_remaining


class Purger:
    """Empties the local trash and, when it exists, the secondary (cloud) trash.

    Each directory gets its own attempt budget. Retries first clear the
    immutable flags and open up permissions, then delete again.
    """

    def __init__(self, config, ops, sleep=time.sleep):
        self.config = config
        self.ops = ops
        self.sleep = sleep
        self._item = item_log(config)
        self.attempts = {}
        self.deleted = 0

    def run(self) -> bool:
        self.attempts = {}
        self.deleted = 0
        log.info('Cleaning up Trash...')
        ok = True
        for label, directory in self.config.trash_dirs:
            if label == 'secondary' and not self.ops.is_dir(directory):
                log.info('secondary trash ' + str(directory) + ' does not exist, skipping')
                continue
            if not self.purge(label, directory):
                ok = False
        if ok:
            log.info('Trash cleaned successfully.')
        return ok

    def purge(self, label, directory) -> bool:
        before = self.ops.list_entries(directory)
        log.info('Items in ' + label + ' trash ' + str(directory) + ' before cleanup: ' + str(len(before)))
        for p in before:
            self._item('  ' + str(p))

        attempt = 1
        self.attempts[label] = attempt
        self.delete_all(directory)

        while True:
            remaining = remaining_entries(self.ops, directory)
            if not remaining:
                log.info(label + ' trash ' + str(directory) + ' is empty')
                return True

            if attempt >= self.config.max_attempts:
                log_remaining(remaining, 'Error: could not clean up ' + label + ' trash ' + str(directory)
                              + ' after ' + str(attempt) + ' attempts, ' + str(len(remaining)) + ' items left:')
                return False

            log.info('Warning: ' + str(len(remaining)) + ' items left in ' + label + ' trash. Retrying in '
                     + str(self.config.retry_delay) + 's (attempt ' + str(attempt + 1)
                     + ' of ' + str(self.config.max_attempts) + ')...')
            self.sleep(self.config.retry_delay)
            log_remaining(remaining, 'Items still in ' + str(directory) + ':')
            attempt += 1
            self.attempts[label] = attempt
            self.unlock(directory)
            self.delete_all(directory)

    def unlock(self, directory):
        try:
            if not self.ops.clear_immutable_flags(directory):
                log.debug('no immutable flags on this platform')
        except TRANSIENT_ERRORS as e:
            errlog.warning('chflags ' + str(directory) + ': ' + str(e))
        try:
            self.ops.set_writable(directory, everyone=True)
        except TRANSIENT_ERRORS as e:
            errlog.warning('chmod ' + str(directory) + ': ' + str(e))

    def _remove(self, path):
        try:
            self.ops.remove_entry(path)
            self.deleted += 1
            self._item('deleting ' + str(path))
        except TRANSIENT_ERRORS as e:
            errlog.warning('rm ' + str(path) + ': ' + str(e))

    def delete_all(self, directory):
        for f in self.ops.list_entries(directory, 'f'):
            self._remove(f)
        for d in sort_deepest_first(self.ops.list_entries(directory, 'd')):
            if self.ops.exists(d):
                self._remove(d)
