from trashMoverLib.logSink import log


def remaining_entries(ops, directory):
    """Everything still below `directory`. A directory that is not there is empty."""
    return ops.list_entries(directory)


def is_empty(ops, directory):
    return len(remaining_entries(ops, directory)) == 0


def log_remaining(remaining, header):
    log.info(header)
    for p in remaining:
        log.info('  ' + str(p))
