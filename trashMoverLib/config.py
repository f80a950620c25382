from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple


@dataclass(frozen=True)
class TrashMoverConfig:
    """Everything a run needs, fixed once at start-up and passed down explicitly."""
    source_dir: Path
    trash_dir: Path
    secondary_trash_dir: Optional[Path]
    log_file: Path
    stderr_log_file: Path
    max_attempts: int = 3
    retry_delay: float = 10 # seconds between attempts
    overwrite: bool = False # False == mv -n, True == mv -f
    sentinel_prefixes: Tuple[str, ...] = ('~$',)
    keep_awake_cmd: Tuple[str, ...] = ('/usr/bin/caffeinate', '-i', '-w')
    notify_title: str = 'Move to Trash'
    verbose: bool = True

    def __post_init__(self):
        # frozen, so go through object.__setattr__ to normalize the paths
        for name in ('source_dir', 'trash_dir', 'log_file', 'stderr_log_file'):
            object.__setattr__(self, name, Path(getattr(self, name)).expanduser())
        if self.secondary_trash_dir is not None:
            object.__setattr__(self, 'secondary_trash_dir', Path(self.secondary_trash_dir).expanduser())
        object.__setattr__(self, 'sentinel_prefixes', tuple(self.sentinel_prefixes))
        object.__setattr__(self, 'keep_awake_cmd', tuple(self.keep_awake_cmd))

        if int(self.max_attempts) != self.max_attempts:
            raise ValueError('max_attempts must be a whole number, got ' + str(self.max_attempts))
        object.__setattr__(self, 'max_attempts', int(self.max_attempts))
        if self.max_attempts < 1:
            raise ValueError('max_attempts must be at least 1, got ' + str(self.max_attempts))
        if self.retry_delay < 0:
            raise ValueError('retry_delay cannot be negative, got ' + str(self.retry_delay))

    @property
    def trash_dirs(self):
        """(label, path) for every trash directory the purger should look at."""
        dirs = [('local', self.trash_dir)]
        if self.secondary_trash_dir is not None:
            dirs.append(('secondary', self.secondary_trash_dir))
        return dirs


def default_config(home=None, **overrides) -> TrashMoverConfig:
    home = Path(home).expanduser() if home is not None else Path.home()
    settings = dict(
        source_dir=home / 'Downloads',
        trash_dir=home / '.Trash',
        secondary_trash_dir=home / 'Library' / 'Mobile Documents' / 'com~apple~CloudDocs' / '.Trash',
        log_file=home / 'move_to_trash.log',
        stderr_log_file=home / 'move_to_trash.stderr',
    )
    settings.update(overrides)
    return TrashMoverConfig(**settings)
