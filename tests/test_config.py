import dataclasses
from pathlib import Path

import pytest

from trashMoverLib.config import TrashMoverConfig, default_config


def test_default_config_paths(tmp_path):
    config = default_config(home=tmp_path)
    assert config.source_dir == tmp_path / 'Downloads'
    assert config.trash_dir == tmp_path / '.Trash'
    assert config.secondary_trash_dir == tmp_path / 'Library' / 'Mobile Documents' / 'com~apple~CloudDocs' / '.Trash'
    assert config.log_file == tmp_path / 'move_to_trash.log'
    assert config.stderr_log_file == tmp_path / 'move_to_trash.stderr'
    assert config.max_attempts == 3
    assert config.retry_delay == 10
    assert config.overwrite is False


def test_overrides(tmp_path):
    config = default_config(home=tmp_path, max_attempts=5, retry_delay=0, secondary_trash_dir=None)
    assert config.max_attempts == 5
    assert config.retry_delay == 0
    assert config.trash_dirs == [('local', tmp_path / '.Trash')]


def test_paths_are_normalized(tmp_path):
    config = TrashMoverConfig(str(tmp_path / 'a'), str(tmp_path / 'b'), str(tmp_path / 'c'),
                              str(tmp_path / 'log'), str(tmp_path / 'err'), sentinel_prefixes=['~$'])
    assert isinstance(config.source_dir, Path)
    assert isinstance(config.secondary_trash_dir, Path)
    assert config.sentinel_prefixes == ('~$',)
    assert [label for label, _ in config.trash_dirs] == ['local', 'secondary']


def test_config_is_frozen(tmp_path):
    config = default_config(home=tmp_path)
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.max_attempts = 10


@pytest.mark.parametrize('bad', [dict(max_attempts=0), dict(retry_delay=-1)])
def test_rejects_bad_tuning(tmp_path, bad):
    with pytest.raises(ValueError):
        default_config(home=tmp_path, **bad)


def test_max_attempts_stored_as_int(tmp_path):
    config = default_config(home=tmp_path, max_attempts=2.0)
    assert config.max_attempts == 2
    assert type(config.max_attempts) is int


def test_rejects_fractional_attempts(tmp_path):
    with pytest.raises(ValueError):
        default_config(home=tmp_path, max_attempts=2.5)
