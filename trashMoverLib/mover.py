import time

from trashMoverLib.fileOps import TRANSIENT_ERRORS, sort_deepest_first
from trashMoverLib.logSink import log, errlog, item_log
from trashMoverLib.verify import is_empty, remaining_entries, log_remaining


class Mover:
    """Empties the source directory into the trash, keeping relative paths.

    One primary pass (per-file moves, then directories deepest-first) and up to
    max_attempts - 1 fallback passes. Only an empty source counts as success.
    """

    def __init__(self, config, ops, sleep=time.sleep):
        self.config = config
        self.ops = ops
        self.sleep = sleep
        self._item = item_log(config)
        self.attempts = 0

    @property
    def source(self):
        return self.config.source_dir

    @property
    def trash(self):
        return self.config.trash_dir

    def run(self) -> bool:
        self.attempts = 0
        if not self.ops.is_dir(self.source):
            log.info('move: ' + str(self.source) + ' does not exist, nothing to move')
            return True

        entries = self.ops.list_entries(self.source)
        log.info('Moving ' + str(len(entries)) + ' items from ' + str(self.source) + ' to ' + str(self.trash) + '...')

        try:
            self.ops.set_writable(self.source)
        except TRANSIENT_ERRORS as e:
            errlog.warning('could not make ' + str(self.source) + ' writable: ' + str(e))

        self.attempts = 1
        self.move_files()
        self.move_dirs()

        while True:
            remaining = remaining_entries(self.ops, self.source)
            if not remaining:
                if self.attempts > 1:
                    log.info('All remaining items successfully moved after retry.')
                log.info('Files and directories moved successfully.')
                return True

            if self.attempts >= self.config.max_attempts:
                log_remaining(remaining, 'Error: ' + str(len(remaining)) + ' items could not be moved after '
                              + str(self.attempts) + ' attempts. Check manually:')
                return False

            log.info('Warning: ' + str(len(remaining)) + ' items could not be moved. Retrying in '
                     + str(self.config.retry_delay) + 's (attempt ' + str(self.attempts + 1)
                     + ' of ' + str(self.config.max_attempts) + ')...')
            self.sleep(self.config.retry_delay)
            log_remaining(remaining, 'Items still in ' + str(self.source) + ':')
            self.attempts += 1
            self.fallback()

    def destination(self, path):
        return self.trash / path.relative_to(self.source)

    def _move(self, path):
        t = self.destination(path)
        try:
            if self.ops.move_entry(path, t, overwrite=self.config.overwrite):
                self._item('move: ' + str(path) + ' -> ' + str(t))
                return True
            log.info('destination exists, leaving ' + str(path) + ' in place')
        except TRANSIENT_ERRORS as e:
            errlog.warning('mv ' + str(path) + ': ' + str(e))
        return False

    def move_files(self):
        log.info('Moving files from ' + str(self.source) + ' to ' + str(self.trash) + '...')
        moved = 0
        for f in self.ops.list_entries(self.source, 'f'):
            moved += self._move(f)
        return moved

    def move_dirs(self):
        log.info('Moving directories from ' + str(self.source) + ' to ' + str(self.trash) + '...')
        moved = 0
        for d in sort_deepest_first(self.ops.list_entries(self.source, 'd')):
            if not self.ops.exists(d):
                continue
            if not is_empty(self.ops, d):
                # still holds something that refused to move, verification reports it
                continue
            t = self.destination(d)
            if self.ops.is_dir(t):
                # its contents are already in the trash, drop the empty shell
                try:
                    self.ops.remove_entry(d)
                    moved += 1
                except TRANSIENT_ERRORS as e:
                    errlog.warning('rmdir ' + str(d) + ': ' + str(e))
                continue
            moved += self._move(d)
        return moved

    def fallback(self):
        """Bulk copy, prune empty directories, then chase dotfiles one by one."""
        try:
            self.ops.copy_tree(self.source, self.trash, overwrite=self.config.overwrite)
        except TRANSIENT_ERRORS as e:
            errlog.warning('copy ' + str(self.source) + ': ' + str(e))

        try:
            self.ops.delete_empty(self.source)
        except TRANSIENT_ERRORS as e:
            errlog.warning('delete empty ' + str(self.source) + ': ' + str(e))

        for f in self.ops.list_entries(self.source, 'f'):
            if self.is_artifact(f.name):
                self._move(f)

    def is_artifact(self, name):
        return name.startswith('.') or name.startswith(self.config.sentinel_prefixes)
