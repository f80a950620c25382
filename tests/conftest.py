import os
from pathlib import Path

import pytest

from trashMoverLib.config import TrashMoverConfig
from trashMoverLib.fileOps import localFileOps, FileOpError
from trashMoverLib.logSink import log, errlog


class recordingSleep:
    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


class lockedFileOps(localFileOps):
    """localFileOps where some paths can never be moved or deleted."""

    def __init__(self, locked=()):
        self.locked = set(locked)
        self.calls = []

    def _is_locked(self, path):
        return any(path == p or path in p.parents for p in self.locked)

    def move_entry(self, src, dst, overwrite=False):
        self.calls.append(('move', src))
        if self._is_locked(src):
            raise PermissionError(1, 'Operation not permitted', str(src))
        return super().move_entry(src, dst, overwrite)

    def copy_tree(self, src_dir, dst_dir, overwrite=False):
        self.calls.append(('copy', src_dir))
        if any(self._is_locked(p) for p in self.list_entries(src_dir)):
            raise FileOpError('rsync: some files could not be transferred')
        return super().copy_tree(src_dir, dst_dir, overwrite)

    def remove_entry(self, path):
        self.calls.append(('remove', path))
        if self._is_locked(path):
            raise PermissionError(1, 'Operation not permitted', str(path))
        return super().remove_entry(path)

    def clear_immutable_flags(self, path):
        self.calls.append(('chflags', path))
        return False

    def count(self, op, path=None):
        return len([c for c in self.calls if c[0] == op and (path is None or c[1] == path)])


@pytest.fixture
def dirs(tmp_path):
    d = {
        'source': tmp_path / 'Downloads',
        'trash': tmp_path / '.Trash',
        'secondary': tmp_path / 'CloudDocs' / '.Trash',
        'logs': tmp_path / 'logs',
    }
    d['source'].mkdir()
    d['trash'].mkdir()
    return d


@pytest.fixture
def make_config(dirs):
    def make(**kw):
        settings = dict(
            source_dir=dirs['source'],
            trash_dir=dirs['trash'],
            secondary_trash_dir=dirs['secondary'],
            log_file=dirs['logs'] / 'move_to_trash.log',
            stderr_log_file=dirs['logs'] / 'move_to_trash.stderr',
            retry_delay=0,
            keep_awake_cmd=(),
        )
        settings.update(kw)
        return TrashMoverConfig(**settings)
    return make


@pytest.fixture
def sleep():
    return recordingSleep()


@pytest.fixture(autouse=True)
def detach_log_handlers():
    yield
    for logger in (log, errlog):
        for h in logger.handlers[:]:
            logger.removeHandler(h)
            h.close()


def touch(path, text='x'):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


def touch_undecodable(directory, raw=b'bad\xff.txt'):
    """A file whose name is not valid UTF-8; skips where the filesystem refuses one."""
    raw_path = os.path.join(os.fsencode(str(directory)), raw)
    try:
        with open(raw_path, 'wb') as f:
            f.write(b'x')
    except OSError as e:
        pytest.skip('filesystem rejects non UTF-8 names: ' + str(e))
    return Path(os.fsdecode(raw_path))
