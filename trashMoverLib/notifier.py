import abc
import os
import shutil
import sys
from subprocess import Popen, PIPE

from trashMoverLib.fileOps import CmdException
from trashMoverLib.logSink import log, stderr_passthrough

FOOTER = '\n\nTo stop these, set HEADLESS = True in trashMoverLib/moveToTrash.py'


def _applescript_str(s):
    return '"' + str(s).replace('\\', '\\\\').replace('"', '\\"') + '"'


class notifierBase(metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def notify(self, title, message, buttons, default_button=None) -> str:
        """Show a dialog and return the label of the button the user picked."""

    def notify_info(self, title, message):
        self.notify(title, message, ('OK',), 'OK')

    @abc.abstractmethod
    def open_path(self, path):
        """Reveal `path` to the user, raises CmdException if that fails."""


class osascriptNotifier(notifierBase):
    """Modal dialogs through `osascript -e 'display dialog ...'` on macOS."""
    timeout = 3600 # a dialog waits for the user

    def _run(self, args, timeout):
        p = Popen(args, stdin=PIPE, stdout=PIPE, stderr=PIPE, close_fds=True)
        try:
            outs, errs = p.communicate(timeout=timeout)
        except Exception as e:
            p.kill()
            p.wait()
            raise CmdException(' '.join(args) + ' did not finish: ' + str(e), ' '.join(args)) from e
        outs = os.fsdecode(outs)
        errs = os.fsdecode(errs)
        stderr_passthrough(errs)
        if p.returncode != 0:
            raise CmdException(' '.join(args) + ' return code: ' + str(p.returncode), ' '.join(args), p.returncode, outs, errs)
        return outs

    def notify(self, title, message, buttons, default_button=None):
        if default_button is None:
            default_button = buttons[-1]
        script = ('display dialog ' + _applescript_str(message + FOOTER)
                  + ' with title ' + _applescript_str(title)
                  + ' buttons {' + ', '.join(_applescript_str(b) for b in buttons) + '}'
                  + ' default button ' + _applescript_str(default_button))
        outs = self._run(['osascript', '-e', script], self.timeout)
        # "button returned:Open Directory"
        for line in outs.splitlines():
            if line.startswith('button returned:'):
                return line[len('button returned:'):].strip()
        return ''

    def open_path(self, path):
        opener = 'open' if sys.platform == 'darwin' else 'xdg-open'
        if shutil.which(opener) is None:
            raise CmdException(opener + ' not found', opener)
        self._run([opener, str(path)], 60)


class headlessNotifier(notifierBase):
    """Writes the dialogs to the log and answers with a fixed choice."""

    def __init__(self, choice=None, fail_open=False):
        self.choice = choice
        self.fail_open = fail_open
        self.shown = []
        self.opened = []

    def notify(self, title, message, buttons, default_button=None):
        self.shown.append((title, message, tuple(buttons)))
        log.info('[' + title + '] ' + message.replace('\n', ' ') + ' ' + str(list(buttons)))
        if self.choice in buttons:
            return self.choice
        return buttons[0]

    def open_path(self, path):
        if self.fail_open:
            raise CmdException('cannot open ' + str(path) + ' without a display', 'open')
        self.opened.append(path)
        log.info('open ' + str(path))
