import pytest

from habana_nri.api.schemas import Container
from habana_nri.core.errors import DeviceResolutionFailed
from habana_nri.services.devices import (
    accelerator_devices,
    fake_device_mode,
    filter_devices_by_env,
    requested_device_ids,
    uverbs_devices,
    visibility_value,
)
from habana_nri.utils.hardware import DeviceCatalog

CATALOG = [f"/dev/accel/accel{i}" for i in range(8)]


def container(*env):
    return Container(name="worker", env=list(env))


def test_all_selects_whole_catalog():
    assert filter_devices_by_env(container("HABANA_VISIBLE_DEVICES=all"), CATALOG) == CATALOG


def test_absent_variable_selects_whole_catalog():
    assert filter_devices_by_env(container("PATH=/usr/bin"), CATALOG) == CATALOG


def test_comma_list_keeps_catalog_order():
    selected = filter_devices_by_env(container("HABANA_VISIBLE_DEVICES=5,1,3"), CATALOG)
    assert selected == ["/dev/accel/accel1", "/dev/accel/accel3", "/dev/accel/accel5"]


def test_unknown_ids_select_nothing():
    assert filter_devices_by_env(container("HABANA_VISIBLE_DEVICES=9"), CATALOG) == []


def test_first_matching_entry_wins():
    c = container("HABANA_VISIBLE_DEVICES=2", "HABANA_VISIBLE_DEVICES=all")
    assert visibility_value(c) == (True, "2")
    assert filter_devices_by_env(c, CATALOG) == ["/dev/accel/accel2"]


def test_entry_without_value_selects_all():
    assert visibility_value(container("HABANA_VISIBLE_DEVICES")) == (True, None)
    assert filter_devices_by_env(container("HABANA_VISIBLE_DEVICES"), CATALOG) == CATALOG


def test_fake_mode_filters_synthetic_catalog(make_probe):
    ids = requested_device_ids(container("HABANA_VISIBLE_DEVICES=0,2"), DeviceCatalog(make_probe()), fake=True)
    assert ids == ["0", "2"]


def test_requested_ids_from_host(catalog):
    assert requested_device_ids(container("HABANA_VISIBLE_DEVICES=3"), catalog) == ["3"]
    assert requested_device_ids(container(), catalog) == [str(i) for i in range(8)]


def test_accelerator_devices_two_paths_per_id(catalog):
    devices = accelerator_devices(["1", "4"], catalog)
    assert [d.path for d in devices] == [
        "/dev/accel/accel1",
        "/dev/accel/accel_controlD1",
        "/dev/accel/accel4",
        "/dev/accel/accel_controlD4",
    ]


def test_accelerator_lookup_failure_aborts(make_probe):
    probe = make_probe(nodes={"/dev/accel/accel0": (508, 0)})
    with pytest.raises(DeviceResolutionFailed):
        accelerator_devices(["0"], DeviceCatalog(probe))


def test_uverbs_skip_unreadable_and_empty(host_probe, catalog):
    host_probe.dirs["/sys/class/infiniband/hlib_1/device/infiniband_verbs"] = PermissionError(13, "Permission denied")
    host_probe.dirs["/sys/class/infiniband/hlib_2/device/infiniband_verbs"] = []
    devices = uverbs_devices(["0", "1", "2", "3"], catalog, host_probe)
    assert [d.path for d in devices] == ["/dev/infiniband/uverbs9", "/dev/infiniband/uverbs12"]


def test_uverbs_fake_table_indexed_by_position(make_probe):
    probe = make_probe()
    devices = uverbs_devices(["0", "2"], DeviceCatalog(probe), probe, fake=True)
    assert [d.path for d in devices] == ["/dev/infiniband/uverbs9", "/dev/infiniband/uverbs10"]


def test_fake_device_mode_is_presence_only():
    assert fake_device_mode({"FAKE_DEVICE": ""})
    assert not fake_device_mode({})
