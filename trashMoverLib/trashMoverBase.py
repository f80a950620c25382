import os
import shutil
import time
import traceback
from collections import namedtuple
from datetime import datetime
from subprocess import Popen, DEVNULL

from trashMoverLib.fileOps import TRANSIENT_ERRORS
from trashMoverLib.logSink import log, errlog
from trashMoverLib.mover import Mover
from trashMoverLib.purger import Purger

RunOutcome = namedtuple('RunOutcome', ['move_succeeded', 'purge_succeeded'])

EXIT_OK = 0
EXIT_PURGE_FAILED = 1
EXIT_MOVE_FAILED = 2

OPEN_BUTTON = 'Open Directory'
DISMISS_BUTTON = 'No, thanks'


def exit_code(outcome):
    if not outcome.purge_succeeded:
        return EXIT_PURGE_FAILED
    if not outcome.move_succeeded:
        return EXIT_MOVE_FAILED
    return EXIT_OK


def start_keep_awake(config):
    """caffeinate -i -w <our pid>, it goes away by itself when we exit."""
    if not config.keep_awake_cmd:
        return None
    exe = config.keep_awake_cmd[0]
    if shutil.which(exe) is None:
        log.info('keep-awake: ' + exe + ' not found, the machine may sleep during the run')
        return None
    try:
        return Popen(list(config.keep_awake_cmd) + [str(os.getpid())], stdout=DEVNULL, stderr=DEVNULL)
    except OSError as e:
        errlog.warning('keep-awake: ' + str(e))
        return None


class trashMoverBase:
    """Move, then purge, then tell the user. One instance per run."""

    def __init__(self, config, ops, notifier, sleep=time.sleep, keep_awake=True):
        self.config = config
        self.ops = ops
        self.notifier = notifier
        self.sleep = sleep
        self.keep_awake = keep_awake
        self.mover = Mover(config, ops, sleep)
        self.purger = Purger(config, ops, sleep)
        self.outcome = None

    def run(self):
        log.info('Script started at ' + datetime.now().ctime())
        if self.keep_awake:
            start_keep_awake(self.config)

        moved = self._phase('move', self.mover.run)
        purged = self._phase('purge', self.purger.run)
        self.outcome = RunOutcome(moved, purged)

        try:
            self.report(self.outcome)
        finally:
            log.info('finished, exit code ' + str(exit_code(self.outcome)))
        return self.outcome

    def _phase(self, name, func):
        """A phase that blows up counts as failed, the rest of the run goes on."""
        try:
            return func()
        except Exception:
            errlog.error(name + ' phase crashed:\n' + traceback.format_exc())
            log.info('Error: ' + name + ' phase crashed, see ' + str(self.config.stderr_log_file))
            return False

    def message_for(self, outcome):
        """(message, problem directory or None) for the final dialog."""
        src = str(self.config.source_dir)
        if outcome.move_succeeded and outcome.purge_succeeded:
            return 'Files moved from ' + src + ' to Trash and Trash emptied!', None
        if outcome.purge_succeeded:
            return ('Some items could not be moved out of ' + src + '. Trash was emptied.\n\nOpen '
                    + src + ' to check.'), self.config.source_dir
        if outcome.move_succeeded:
            return ('Files moved to Trash, but Trash could not be emptied.\n\nOpen '
                    + str(self.config.trash_dir) + ' to check.'), self.config.trash_dir
        return ('Error occurred while moving files and emptying Trash! Open ' + src
                + ' to check.'), self.config.source_dir

    def report(self, outcome):
        title = self.config.notify_title
        message, problem_dir = self.message_for(outcome)
        try:
            if problem_dir is None:
                self.notifier.notify_info(title, message)
                return
            choice = self.notifier.notify(title, message, (DISMISS_BUTTON, OPEN_BUTTON), OPEN_BUTTON)
        except TRANSIENT_ERRORS as e:
            errlog.warning('notify: ' + str(e))
            return

        if choice != OPEN_BUTTON:
            return
        try:
            self.notifier.open_path(problem_dir)
        except TRANSIENT_ERRORS as e:
            log.info('Failed to open ' + str(problem_dir) + ': ' + str(e))
            try:
                self.notifier.notify_info(title, 'Failed to open ' + str(problem_dir) + '.\n\n' + str(e))
            except TRANSIENT_ERRORS as e2:
                errlog.warning('notify: ' + str(e2))
