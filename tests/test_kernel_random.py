import pytest

from procfs import kernel_random
from procfs.errors import NotFoundError, OtherError, ProcIOError


@pytest.fixture
def random_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(kernel_random, "_RANDOM_ROOT", tmp_path)
    return tmp_path


def test_live_entropy_avail():
    assert 0 <= kernel_random.entropy_avail() <= 4096


def test_live_boot_id_is_stable():
    first = kernel_random.boot_id()
    assert len(first) == 36
    assert kernel_random.boot_id() == first


def test_live_uuid_changes():
    first = kernel_random.uuid()
    assert len(first) == 36
    assert kernel_random.uuid() != first


def test_entropy_from_file(random_dir):
    (random_dir / "entropy_avail").write_text("256\n")
    assert kernel_random.entropy_avail() == 256


def test_poolsize_from_file(random_dir):
    (random_dir / "poolsize").write_text("4096\n")
    assert kernel_random.poolsize() == 4096


def test_poolsize_too_large(random_dir):
    (random_dir / "poolsize").write_text("70000\n")
    with pytest.raises(OtherError):
        kernel_random.poolsize()


def test_read_threshold_preferred(random_dir):
    (random_dir / "read_wakeup_threshold").write_text("64\n")
    (random_dir / "write_wakeup_threshold").write_text("896\n")
    assert kernel_random.read_wakeup_threshold() == 64


def test_read_threshold_falls_back(random_dir):
    (random_dir / "write_wakeup_threshold").write_text("896\n")
    assert kernel_random.read_wakeup_threshold() == 896


def test_read_threshold_other_errors_propagate(random_dir):
    (random_dir / "read_wakeup_threshold").mkdir()
    (random_dir / "write_wakeup_threshold").write_text("896\n")
    with pytest.raises(ProcIOError):
        kernel_random.read_wakeup_threshold()


def test_read_threshold_both_missing(random_dir):
    with pytest.raises(NotFoundError) as info:
        kernel_random.read_wakeup_threshold()
    assert info.value.path == random_dir / "write_wakeup_threshold"


def test_write_threshold_round_trip(random_dir):
    kernel_random.write_wakeup_threshold(1024)
    assert (random_dir / "write_wakeup_threshold").read_text() == "1024"
    assert kernel_random.read_wakeup_threshold() == 1024


def test_write_threshold_rejects_negative(random_dir):
    with pytest.raises(ValueError):
        kernel_random.write_wakeup_threshold(-5)


def test_uuid_from_file_is_stripped(random_dir):
    (random_dir / "uuid").write_text("1b4e28ba-2fa1-11d2-883f-0016d3cca427\n")
    assert kernel_random.uuid() == "1b4e28ba-2fa1-11d2-883f-0016d3cca427"