# procfs

A pure-Python library for reading the Linux `/proc` filesystem: the kernel
tunables under `/proc/sys`, the threads of a process, and its open file
descriptors. It has no dependencies outside the standard library and works only
on Linux.

## Installation

```
pip install procfs
```

## Kernel information and tuning

```python
from procfs.kernel import Version, BuildInfo, SemaphoreLimits, kernel_version, pid_max, sysrq
from procfs import vm, fs, keys, kernel_random, binfmt_misc

print(kernel_version())                         # e.g. 6.1.0
print(Version.parse("3.16.0-6-amd64") >= Version(3, 16, 0))
print(BuildInfo.current().smp())
print(SemaphoreLimits.current())
print(pid_max(), sysrq().to_number())
print(vm.max_map_count(), fs.file_nr(), fs.dentry_state())
print(keys.maxkeys(), kernel_random.entropy_avail(), kernel_random.boot_id())

if binfmt_misc.enabled():
    for entry in binfmt_misc.entries():
        print(entry.name, entry.interpreter, entry.flags, entry.data)
```

The parsers can also be used on text you already have, for example
`SemaphoreLimits.parse("32000 1024000000 500 32000")`,
`BuildInfo.parse("#1 SMP PREEMPT Thu Sep 30 15:29:01 UTC 2021")` or
`BinFmtEntry.parse(name, text)`.

The setter functions, such as `vm.drop_caches(vm.DropCache.PAGE_CACHE)`,
`fs.set_file_max(...)` or `kernel.set_threads_max(...)`, write to `/proc/sys`
and usually need root. `kernel.set_threads_max` refuses values outside
`THREADS_MIN..THREADS_MAX` on Linux 4.1 and later.

## Threads and file descriptors

```python
import os
from procfs.task import iter_tasks
from procfs.fdinfo import FDInfo

pid = os.getpid()
for task in iter_tasks(f"/proc/{pid}", pid):
    with task:
        print(task.tid, task.comm(), task.children())

fd = FDInfo.from_raw_fd(pid, 0)
print(fd.fd, fd.target, fd.permissions())
```

A `Task` keeps its `/proc/<pid>/task/<tid>` directory open, so reads through
`read_text`, `read_bytes`, `comm` and `children` refer to the same thread even
if its id is reused. Close it with `close()` or a `with` block.

## What this package does not do

There is no object for a whole process and no way to list every process on the
system: command lines, environments, working directories, namespaces and the
like of a process are not read here. Clock ticks per second and the page size
are not provided either.

## Errors

Every failure while reading or writing a procfs file raises a subclass of
`procfs.errors.ProcError`:

- `NotFoundError`: the file or the process does not exist (any more)
- `PermissionDeniedError`: not allowed to read or write
- `ProcIOError`: any other I/O error; its `errno` attribute holds the code
- `InternalError`: the file contents could not be parsed
- `OtherError`: a value could not be parsed or was rejected

When it is known, the path concerned is available as the error's `path`
attribute. The `parse` class methods raise `ValueError` on malformed text.

## Running the tests

```
pip install -e ".[test]"
pytest
```