"""
File system backends for the document store.

`LocalFileSystem` talks to the real disk and writes through a temp file and
`os.replace`, so a reader never sees a half-written document.
`MemoryFileSystem` keeps everything in a dict and is used to exercise the
store and the migration shim without touching disk.

Both raise the builtin `FileNotFoundError` for missing files and let any
other `OSError` propagate.
"""

import os
import posixpath
import tempfile


class LocalFileSystem:
    join = staticmethod(os.path.join)

    def exists(self, path):
        return os.path.exists(path)

    def read_text(self, path):
        with open(path, 'r', encoding='utf-8') as f:
            return f.read()

    def write_text(self, path, text):
        directory = os.path.dirname(path) or '.'
        tmp_fd, tmp_path = tempfile.mkstemp(prefix='.tmp-', suffix='.json', dir=directory)
        try:
            with os.fdopen(tmp_fd, 'w', encoding='utf-8') as f:
                f.write(text)
            os.replace(tmp_path, path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def remove(self, path):
        os.remove(path)

    def makedirs(self, path):
        os.makedirs(path, exist_ok=True)


class MemoryFileSystem:
    join = staticmethod(posixpath.join)

    def __init__(self, files=None):
        self.files = dict(files or {})
        self.dirs = set()

    def exists(self, path):
        return path in self.files or path in self.dirs

    def read_text(self, path):
        if path not in self.files:
            raise FileNotFoundError(path)
        return self.files[path]

    def write_text(self, path, text):
        parent = posixpath.dirname(path)
        if parent and parent not in self.dirs:
            raise FileNotFoundError(parent)
        self.files[path] = text

    def remove(self, path):
        if path not in self.files:
            raise FileNotFoundError(path)
        del self.files[path]

    def makedirs(self, path):
        # Register every ancestor so nested writes succeed
        while path and path not in self.dirs:
            self.dirs.add(path)
            parent = posixpath.dirname(path)
            if parent == path:
                break
            path = parent
