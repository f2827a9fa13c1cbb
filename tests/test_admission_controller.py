# tests/test_admission_controller.py
import pytest

from controllers.admission_controller import AdmissionController


@pytest.mark.asyncio
async def test_rejects_buy_beyond_capacity_until_release():
    adm = AdmissionController(2)
    assert await adm.try_admit_buy()
    assert await adm.try_admit_buy()
    assert not await adm.try_admit_buy()
    assert adm.in_flight == 2

    adm.release_buy()
    assert adm.available_permits == 1
    assert await adm.try_admit_buy()


@pytest.mark.asyncio
async def test_active_sells_count_against_capacity():
    adm = AdmissionController(1)
    adm.sell_started()
    assert adm.in_flight == 1
    assert not await adm.try_admit_buy()

    adm.sell_finished()
    assert await adm.try_admit_buy()


@pytest.mark.asyncio
async def test_selling_context_always_finishes():
    adm = AdmissionController(1)
    with pytest.raises(RuntimeError):
        async with adm.selling():
            assert adm.active_sells == 1
            raise RuntimeError("boom")
    assert adm.active_sells == 0


def test_release_without_admission_is_an_error():
    adm = AdmissionController(1)
    with pytest.raises(RuntimeError):
        adm.release_buy()


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        AdmissionController(0)
