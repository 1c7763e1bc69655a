''' Author: Lucas Rath

Mirror stdout/stderr of a (test) run into log files.

How to use:

```python
with Tee(Path(__file__).parent / 'log', Path(__file__).stem) as T:
    unittest.main(verbosity=2, exit=False)
```
writes `log/<name>.stdout.log` and `log/<name>.stderr.log`.
'''

import sys
import traceback
from pathlib import Path


class StreamSplitter(object):
    ''' File-like object writing every message to all of its streams '''
    def __init__(self, *streams):
        self.streams = list(streams)

    def write(self, message):
        for s in self.streams:
            s.write(message)
        self.flush()

    def flush(self):
        for s in self.streams:
            s.flush()

    def isatty(self):
        return False


class Tee(object):

    def __init__(self, folder:str, name:str, print_stdout:bool=True, print_stderr:bool=True):
        self.folder = Path(folder)
        self.name = name
        self.print_stdout = print_stdout
        self.print_stderr = print_stderr
        self.folder.mkdir(parents=True, exist_ok=True)

    @property
    def stdout_file(self) -> Path:
        return self.folder / f'{self.name}.stdout.log'

    @property
    def stderr_file(self) -> Path:
        return self.folder / f'{self.name}.stderr.log'

    def __enter__(self):
        self._stdout, self._stderr = sys.stdout, sys.stderr
        self._fout = open(self.stdout_file, 'w')
        self._ferr = open(self.stderr_file, 'w')
        sys.stdout = StreamSplitter(self._fout, *[self._stdout] * self.print_stdout)
        sys.stderr = StreamSplitter(self._ferr, *[self._stderr] * self.print_stderr)
        return self

    def __exit__(self, exc_type, exc_value, tb):
        if exc_type is not None:
            self._ferr.write(''.join(traceback.format_exception(exc_type, exc_value, tb)))
        sys.stdout.flush()
        sys.stderr.flush()
        sys.stdout, sys.stderr = self._stdout, self._stderr
        self._fout.close()
        self._ferr.close()
        # do not suppress exceptions
        return False
