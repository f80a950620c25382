import logging

from trashMoverLib.logSink import configure_logging, log, errlog, stderr_passthrough, benignWarningFilter


def test_log_files_are_truncated(make_config):
    config = make_config()
    config.log_file.parent.mkdir(parents=True)
    config.log_file.write_text('yesterday\n')
    config.stderr_log_file.write_text('yesterday\n')

    configure_logging(config, console=False)
    log.info('Script started')

    text = config.log_file.read_text()
    assert 'yesterday' not in text
    assert 'Script started' in text
    # timestamped
    assert text[:4].isdigit()
    assert config.stderr_log_file.read_text() == ''


def test_stderr_filter_drops_benign_noise(make_config):
    config = make_config()
    configure_logging(config, console=False)
    stderr_passthrough('2024-01-01 osascript[123] IMKClient subclass: X\n'
                       'mv: cannot move: Operation not permitted\n'
                       '\n'
                       'osascript[123] IMKInputSession subclass: Y\n')
    errlog.warning('rm /x: busy')

    lines = config.stderr_log_file.read_text().splitlines()
    assert lines == ['mv: cannot move: Operation not permitted', 'rm /x: busy']


def test_stderr_does_not_leak_into_main_log(make_config):
    config = make_config()
    configure_logging(config, console=False)
    errlog.warning('noisy tool output')
    assert 'noisy tool output' not in config.log_file.read_text()


def test_reconfigure_replaces_handlers(make_config):
    config = make_config()
    configure_logging(config)
    configure_logging(config)
    assert len(log.handlers) == 2
    assert len(errlog.handlers) == 1


def test_filter_custom_substrings():
    f = benignWarningFilter(['boring'])
    keep = logging.LogRecord('x', logging.WARNING, __file__, 1, 'important', None, None)
    drop = logging.LogRecord('x', logging.WARNING, __file__, 1, 'so boring', None, None)
    assert f.filter(keep)
    assert not f.filter(drop)
