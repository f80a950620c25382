import argparse
import shutil
import sys

from trashMoverLib.config import default_config
from trashMoverLib.fileOps import localFileOps
from trashMoverLib.logSink import configure_logging, log
from trashMoverLib.notifier import headlessNotifier, osascriptNotifier
from trashMoverLib.shellFileOps import shellFileOps
from trashMoverLib.trashMoverBase import trashMoverBase, exit_code

MAX_ATTEMPTS = 3
RETRY_DELAY = 10 # seconds
OVERWRITE = False # never clobber something already in the trash
HEADLESS = False # True: the final dialog only goes to the log

SHELL_TOOLS = ('find', 'mv', 'rm', 'rsync', 'chmod')


def parse_args(argv=None):
    # no options, paths and tuning are the constants above
    parser = argparse.ArgumentParser(description='Move Downloads to the Trash, then empty the Trash.')
    return parser.parse_args(argv)


def pick_file_ops(config):
    """The BSD tools on a Mac, plain Python everywhere else."""
    if sys.platform != 'darwin':
        return localFileOps()
    missing = [t for t in SHELL_TOOLS if shutil.which(t) is None]
    if missing:
        log.info('missing ' + ', '.join(missing) + ', falling back to python file operations')
        return localFileOps()
    return shellFileOps(verbose=config.verbose)


def pick_notifier():
    if HEADLESS or shutil.which('osascript') is None:
        return headlessNotifier()
    return osascriptNotifier()


def main(argv=None):
    parse_args(argv)
    config = default_config(max_attempts=MAX_ATTEMPTS, retry_delay=RETRY_DELAY, overwrite=OVERWRITE)
    configure_logging(config)

    mover = trashMoverBase(config, pick_file_ops(config), pick_notifier())
    return exit_code(mover.run())


if __name__ == '__main__':
    sys.exit(main())
