"""Device registry tests against the SQLite store."""
import pytest

from app.domain.common.errors import (
    DeviceDisabledError,
    InvalidDeviceError,
    InvalidInputError,
    NotFoundError,
)
from app.domain.devices.models import DeviceStatus
from app.domain.devices.services import DeviceRegistry
from app.infra.db.repositories.device_repo import DeviceRepositoryImpl


@pytest.fixture
def registry(db_session, clock):
    return DeviceRegistry(DeviceRepositoryImpl(db_session, clock))


async def test_register_then_authenticate(registry):
    token = await registry.register("d1", "n1")
    device = await registry.authenticate(token)
    assert device.device_id == "d1"
    assert device.device_name == "n1"
    assert device.status == DeviceStatus.ACTIVE


@pytest.mark.parametrize("device_id,device_name", [("", "n1"), ("d1", ""), ("  ", "n1"), (None, "n1")])
async def test_register_requires_id_and_name(registry, device_id, device_name):
    with pytest.raises(InvalidInputError):
        await registry.register(device_id, device_name)


async def test_reregister_rotates_token(registry):
    old = await registry.register("d1", "n1")
    new = await registry.register("d1", "renamed")
    assert new != old

    with pytest.raises(InvalidDeviceError):
        await registry.authenticate(old)
    device = await registry.authenticate(new)
    assert device.device_name == "renamed"


async def test_unknown_token_rejected(registry):
    await registry.register("d1", "n1")
    with pytest.raises(InvalidDeviceError):
        await registry.authenticate("f" * 64)
    with pytest.raises(InvalidDeviceError):
        await registry.authenticate("")


async def test_disabled_device_rejected(registry):
    token = await registry.register("d1", "n1")
    await registry.set_status("d1", DeviceStatus.DISABLED)
    with pytest.raises(DeviceDisabledError):
        await registry.authenticate(token)

    # Status lookup still works for disabled devices
    device = await registry.get_status(token)
    assert device.status == DeviceStatus.DISABLED


async def test_reregister_reactivates_disabled_device(registry):
    await registry.register("d1", "n1")
    await registry.set_status("d1", DeviceStatus.DISABLED)
    token = await registry.register("d1", "n1")
    device = await registry.authenticate(token)
    assert device.status == DeviceStatus.ACTIVE


async def test_set_status_unknown_device(registry):
    with pytest.raises(NotFoundError):
        await registry.set_status("nope", DeviceStatus.DISABLED)


async def test_get_status_unknown_token(registry):
    with pytest.raises(NotFoundError):
        await registry.get_status("f" * 64)


async def test_token_not_in_repr(registry):
    token = await registry.register("d1", "n1")
    device = await registry.authenticate(token)
    assert token not in repr(device)
