from datetime import datetime, timezone

import pytest

from procfs.errors import OtherError
from procfs.kernel import (
    AllowedFunctions,
    BuildInfo,
    KernelType,
    SemaphoreLimits,
    SysRq,
    Version,
    kernel_version,
    pid_max,
    shmall,
    shmmax,
    shmmni,
    sysrq,
    threads_max,
)


@pytest.mark.parametrize("text", ["3.16.0-6-amd64", "3.16.0", "3.16.0_1"])
def test_version_parse(text):
    assert Version.parse(text) == Version(3, 16, 0)


def test_version_ordering():
    assert Version(4, 1, 0) > Version(3, 16, 200)
    assert Version(3, 16, 1) > Version(3, 16, 0)
    assert Version(2, 6, 32) < Version(2, 7, 0)
    assert sorted([Version(5, 0, 0), Version(2, 6, 0), Version(3, 1, 9)]) == [
        Version(2, 6, 0),
        Version(3, 1, 9),
        Version(5, 0, 0),
    ]


def test_version_parse_missing_component():
    with pytest.raises(ValueError, match="^Missing patch version component$"):
        Version.parse("3.16")
    with pytest.raises(ValueError, match="^Missing minor version component$"):
        Version.parse("")


def test_version_parse_out_of_range():
    with pytest.raises(ValueError, match="^Failed to parse major version$"):
        Version.parse("300.1.1")
    with pytest.raises(ValueError, match="^Failed to parse minor version$"):
        Version.parse("3..1")


def test_kernel_type():
    assert KernelType.parse("Linux").sysname == "Linux"


def test_build_info_ubuntu():
    a = BuildInfo.parse("#1 SMP PREEMPT Thu Sep 30 15:29:01 UTC 2021")
    assert a.version == "1"
    assert a.version_number() == 1
    assert a.flags == {"SMP", "PREEMPT"}
    assert a.smp()
    assert a.preempt()
    assert not a.preemptrt()
    assert a.extra == "Thu Sep 30 15:29:01 UTC 2021"
    assert a.extra_date().astimezone(timezone.utc) == datetime(
        2021, 9, 30, 15, 29, 1, tzinfo=timezone.utc
    )


def test_build_info_arch():
    b = BuildInfo.parse("#1 SMP PREEMPT Fri, 12 Nov 2021 19:22:10 +0000")
    assert b.version == "1"
    assert b.version_number() == 1
    assert b.flags == {"SMP", "PREEMPT"}
    assert b.extra == "Fri, 12 Nov 2021 19:22:10 +0000"
    assert b.smp()
    assert b.preempt()
    assert not b.preemptrt()
    assert b.extra_date().astimezone(timezone.utc) == datetime(
        2021, 11, 12, 19, 22, 10, tzinfo=timezone.utc
    )


def test_build_info_debian():
    c = BuildInfo.parse("#1 SMP Debian 5.10.46-4 (2021-08-03)")
    assert c.version == "1"
    assert c.version_number() == 1
    assert c.flags == {"SMP"}
    assert c.extra == "Debian 5.10.46-4 (2021-08-03)"
    assert c.smp()
    assert not c.preempt()
    assert not c.preemptrt()
    with pytest.raises(OtherError):
        c.extra_date()


def test_build_info_version_number_prefix():
    info = BuildInfo.parse("#21~1 SMP Mon Jan 1 00:00:00 UTC 2024")
    assert info.version == "21~1"
    assert info.version_number() == 21


def test_build_info_version_number_error():
    info = BuildInfo.parse("#abc SMP")
    with pytest.raises(OtherError):
        info.version_number()


def test_build_info_requires_hash():
    with pytest.raises(ValueError, match="^Failed to parse kernel build version$"):
        BuildInfo.parse("1 SMP PREEMPT")


def test_semaphore_limits():
    a = SemaphoreLimits.parse("32000\t1024000000\t500\t32000")
    assert a == SemaphoreLimits(
        semmsl=32_000, semmns=1_024_000_000, semopm=500, semmni=32_000
    )


def test_semaphore_limits_errors():
    with pytest.raises(ValueError, match="^Missing SEMMNS$"):
        SemaphoreLimits.parse("1")
    with pytest.raises(ValueError, match="^Failed to parse SEMMNS$"):
        SemaphoreLimits.parse("1 string 500 3200")


@pytest.mark.parametrize(
    "text, expected",
    [
        ("0", SysRq(False)),
        ("1", SysRq(True)),
        ("2", SysRq(True, AllowedFunctions.ENABLE_CONTROL_LOG_LEVEL)),
        (
            "176",
            SysRq(
                True,
                AllowedFunctions.ENABLE_SYNC_COMMAND
                | AllowedFunctions.ENABLE_REMOUNT_READ_ONLY
                | AllowedFunctions.ALLOW_REBOOT_POWEROFF,
            ),
        ),
    ],
)
def test_sysrq_parse(text, expected):
    parsed = SysRq.parse(text)
    assert parsed == expected
    assert parsed.to_number() == int(text)


@pytest.mark.parametrize("text", ["3", "512", "abc", "70000"])
def test_sysrq_parse_invalid(text):
    with pytest.raises(ValueError):
        SysRq.parse(text)


def test_current_values():
    version = Version.current()
    assert version.major >= 2
    assert kernel_version() == version
    assert KernelType.current().sysname == "Linux"
    assert BuildInfo.current().version_number() >= 0


def test_pid_max():
    assert pid_max() > 0


def test_sem():
    limits = SemaphoreLimits.current()
    assert min(limits.semmsl, limits.semmns, limits.semopm, limits.semmni) >= 0


def test_shm_values():
    assert shmall() >= 0
    assert shmmax() >= 0
    assert shmmni() > 0


def test_threads_max():
    assert threads_max() > 0