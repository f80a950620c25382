import abc
import os
import shutil
import stat
from pathlib import Path


class FileOpError(RuntimeError):
    """One or more filesystem operations failed.

    Batch operations keep going after a failure and raise this at the end, with
    every (path, error) pair in `failures`.
    """
    def __init__(self, msg, failures=()):
        super().__init__(msg)
        self.failures = list(failures)

    def __str__(self):
        s = super().__str__()
        for path, err in self.failures:
            s += '\n  ' + str(path) + ': ' + str(err)
        return s


class CmdException(FileOpError):
    def __init__(self, msg, cmd='', returncode=None, outs='', errs=''):
        super().__init__(msg)
        self.cmd = cmd
        self.returncode = returncode
        self.outs = outs
        self.errs = errs


# anything a single move/delete/chmod can throw at us, retried by the callers
TRANSIENT_ERRORS = (OSError, FileOpError)


def sort_deepest_first(paths):
    # post-order, children before their parents
    return sorted(paths, key=lambda p: (len(Path(p).parts), str(p)), reverse=True)


class fileOpsBase(metaclass=abc.ABCMeta):
    """The filesystem verbs the mover and purger are written against."""

    @abc.abstractmethod
    def list_entries(self, directory, entry_type=None):
        """Every path below `directory` (not the directory itself), sorted.

        entry_type is None for everything, 'f' for anything that is not a
        directory, 'd' for directories. A missing directory lists as [].
        """

    @abc.abstractmethod
    def move_entry(self, src, dst, overwrite=False) -> bool:
        """Move src to exactly dst, creating dst's parents.

        Returns False without touching anything when dst exists and overwrite
        is off.
        """

    @abc.abstractmethod
    def copy_tree(self, src_dir, dst_dir, overwrite=False):
        """Archive-copy the contents of src_dir into dst_dir, removing each
        source file once it has been copied (rsync --remove-source-files)."""

    @abc.abstractmethod
    def remove_entry(self, path):
        """rm -rf, a missing path is fine"""

    @abc.abstractmethod
    def delete_empty(self, directory):
        """Remove every empty directory below `directory`, deepest first."""

    @abc.abstractmethod
    def set_writable(self, path, everyone=False):
        pass

    @abc.abstractmethod
    def clear_immutable_flags(self, path):
        pass

    def exists(self, path):
        return os.path.lexists(str(path))

    def is_dir(self, path):
        path = Path(path)
        return path.is_dir() and not path.is_symlink()


class localFileOps(fileOpsBase):
    """fileOpsBase on top of os/shutil, no external tools needed."""

    def _walk(self, directory):
        for root, dirnames, filenames in os.walk(str(directory)):
            for name in dirnames:
                p = Path(root, name)
                yield p, not p.is_symlink()
            for name in filenames:
                yield Path(root, name), False

    def list_entries(self, directory, entry_type=None):
        if not self.is_dir(directory):
            return []
        entries = []
        for p, isdir in self._walk(directory):
            if entry_type == 'f' and isdir:
                continue
            if entry_type == 'd' and not isdir:
                continue
            entries.append(p)
        return sorted(entries)

    def _tree(self, path):
        path = Path(path)
        if not self.exists(path):
            return []
        return [path] + self.list_entries(path)

    def move_entry(self, src, dst, overwrite=False):
        src = Path(src)
        dst = Path(dst)
        if self.exists(dst):
            if not self.is_dir(src) and not src.is_symlink() and not dst.is_symlink() and src.samefile(dst):
                # a hard link to what is already in the trash
                src.unlink()
                return True
            if not overwrite:
                return False
            self.remove_entry(dst)
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(src), str(dst))
        return True

    def copy_tree(self, src_dir, dst_dir, overwrite=False):
        src_dir = Path(src_dir)
        dst_dir = Path(dst_dir)
        failures = []
        for p, isdir in self._walk(src_dir):
            t = dst_dir / p.relative_to(src_dir)
            try:
                if isdir:
                    t.mkdir(parents=True, exist_ok=True)
                    continue
                if self.exists(t):
                    if not overwrite:
                        continue
                    self.remove_entry(t)
                t.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(str(p), str(t), follow_symlinks=False)
                p.unlink()
            except OSError as e:
                failures.append((p, e))
        if failures:
            raise FileOpError('copy ' + str(src_dir) + ' -> ' + str(dst_dir) + ' failed for ' + str(len(failures)) + ' items', failures)

    def remove_entry(self, path):
        path = Path(path)
        if not self.exists(path):
            return
        if self.is_dir(path):
            shutil.rmtree(str(path))
        else:
            path.unlink()

    def delete_empty(self, directory):
        failures = []
        for d in sort_deepest_first(self.list_entries(directory, 'd')):
            try:
                if not os.listdir(str(d)):
                    d.rmdir()
            except OSError as e:
                failures.append((d, e))
        if failures:
            raise FileOpError('could not delete empty directories under ' + str(directory), failures)

    def set_writable(self, path, everyone=False):
        failures = []
        for p in self._tree(path):
            if p.is_symlink():
                continue
            try:
                mode = stat.S_IMODE(p.stat().st_mode)
                if everyone:
                    # chmod -R ugo+rwX
                    mode |= stat.S_IRUSR | stat.S_IWUSR | stat.S_IRGRP | stat.S_IWGRP | stat.S_IROTH | stat.S_IWOTH
                    if self.is_dir(p) or mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH):
                        mode |= stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH
                else:
                    mode |= stat.S_IWUSR
                os.chmod(str(p), mode)
            except OSError as e:
                failures.append((p, e))
        if failures:
            raise FileOpError('chmod failed under ' + str(path), failures)

    def clear_immutable_flags(self, path):
        """Returns False where the platform has no file flags (Linux)."""
        if not hasattr(os, 'chflags'):
            return False
        immutable = stat.UF_IMMUTABLE | stat.SF_IMMUTABLE
        failures = []
        for p in self._tree(path):
            try:
                flags = os.lstat(str(p)).st_flags
                if flags & immutable:
                    os.chflags(str(p), flags & ~immutable, follow_symlinks=False)
            except OSError as e:
                failures.append((p, e))
        if failures:
            raise FileOpError('chflags failed under ' + str(path), failures)
        return True
