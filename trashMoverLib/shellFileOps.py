import os
import shlex
import shutil
import traceback
from pathlib import Path
from subprocess import Popen, PIPE

from trashMoverLib.fileOps import fileOpsBase, CmdException
from trashMoverLib.logSink import log, stderr_passthrough


NO_FLAG_SUPPORT = ('Inappropriate ioctl', 'Operation not supported')


def q(path):
    return shlex.quote(str(path))


class shellFileOps(fileOpsBase):
    """fileOpsBase by shelling out to find/mv/rsync/rm/chmod/chflags.

    This is what runs on the Mac; every stderr line of every command lands in
    the stderr log.
    """
    timeout = 300

    def __init__(self, verbose=False):
        self.verbose = verbose
        self._last_cmd_called = ''
        self._last_cmd_outs = ''
        self._last_cmd_errs = ''
        self._last_cmd_errcode = 0

    def _call(self, cmd):
        if self.verbose:
            log.debug(cmd)

        # bytes in, os.fsdecode out, so names that are not valid UTF-8 survive the round trip
        p = Popen(cmd, shell=True, stdin=PIPE, stdout=PIPE, stderr=PIPE, close_fds=True)
        try:
            outs, errs = p.communicate(timeout=self.timeout)
        except Exception as e:
            p.kill()
            p.wait()
            stderr_passthrough(traceback.format_exc())
            raise CmdException(cmd + ' did not finish: ' + str(e), cmd) from e

        outs = os.fsdecode(outs)
        errs = os.fsdecode(errs)
        stderr_passthrough(errs)
        ret = p.returncode
        self._last_cmd_called = cmd
        self._last_cmd_outs = outs
        self._last_cmd_errs = errs
        self._last_cmd_errcode = ret
        if ret != 0:
            raise CmdException(cmd + ' return code: ' + str(ret), cmd, ret, outs, errs)
        return outs

    def list_entries(self, directory, entry_type=None):
        if not self.is_dir(directory):
            return []
        cmd = 'find ' + q(directory) + ' -mindepth 1'
        if entry_type == 'f':
            cmd += ' ! -type d'
        elif entry_type == 'd':
            cmd += ' -type d'
        try:
            outs = self._call(cmd + ' -print0')
        except CmdException as e:
            # find still prints what it could read
            outs = e.outs or ''
        return sorted(Path(p) for p in outs.split('\0') if p)

    def move_entry(self, src, dst, overwrite=False):
        if self.exists(dst):
            s = Path(src)
            if not self.is_dir(s) and not s.is_symlink() and not Path(dst).is_symlink() and s.samefile(dst):
                self._call('rm -f ' + q(src))
                return True
            if not overwrite:
                return False
            # mv -f cannot replace a directory with a file or a non-empty directory
            self.remove_entry(dst)
        self._call('mkdir -p ' + q(Path(dst).parent) + ' && mv -f ' + q(src) + ' ' + q(dst))
        return True

    def copy_tree(self, src_dir, dst_dir, overwrite=False):
        if shutil.which('rsync') is None:
            raise CmdException('rsync not found')
        opts = '-a --remove-source-files'
        if not overwrite:
            opts += ' --ignore-existing'
        # trailing slashes, copy the contents not the directory
        outs = self._call('rsync ' + opts + ' ' + q(str(src_dir) + '/') + ' ' + q(str(dst_dir) + '/'))
        if outs.strip():
            log.debug(outs.strip())

    def remove_entry(self, path):
        self._call('rm -rf ' + q(path))

    def delete_empty(self, directory):
        if not self.is_dir(directory):
            return
        self._call('find ' + q(directory) + ' -mindepth 1 -type d -empty -delete')

    def set_writable(self, path, everyone=False):
        if not self.exists(path):
            return
        self._call('chmod -R ' + ('ugo+rwX' if everyone else 'u+w') + ' ' + q(path))

    def clear_immutable_flags(self, path):
        if not self.exists(path):
            return True
        if shutil.which('chflags'):
            self._call('chflags -R nouchg,noschg ' + q(path))
            return True
        if shutil.which('chattr'):
            try:
                self._call('chattr -R -i ' + q(path))
            except CmdException as e:
                # tmpfs, overlayfs and friends keep no inode flags at all
                if any(s in (e.errs or '') for s in NO_FLAG_SUPPORT):
                    return False
                raise
            return True
        return False
