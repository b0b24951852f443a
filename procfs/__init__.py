"""Access to Linux kernel tunables, threads and file descriptors through /proc."""

__version__ = "0.1.0"

__all__ = [
    "binfmt_misc",
    "errors",
    "fdinfo",
    "fs",
    "kernel",
    "kernel_random",
    "keys",
    "task",
    "vm",
]