import asyncio
import logging

import pytest

from blockdash.chain_client import ChainClientError
from blockdash.polling import PollingController
from blockdash.view_state import DEFAULT_ERROR_MESSAGE, Failed, Idle, Loading, Ready

from .helpers import FakeChainClient, make_block

LONG = 60.0


async def settle(controller):
    await asyncio.sleep(0)
    await controller.drain()


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        PollingController(FakeChainClient([1], [make_block()]), interval=0)


def test_starts_idle():
    controller = PollingController(FakeChainClient([1], [make_block()]))
    assert isinstance(controller.state, Idle)
    assert not controller.active


@pytest.mark.asyncio
async def test_activation_fetches_immediately():
    block = make_block(number=100)
    client = FakeChainClient([100], [block])
    controller = PollingController(client, interval=LONG)

    controller.activate()
    assert controller.state == Loading()
    await settle(controller)

    state = controller.state
    assert isinstance(state, Ready)
    assert (state.loading, state.error, state.block, state.block_number) == (False, None, block, 100)
    assert client.number_calls == client.block_calls == 1
    controller.deactivate()


@pytest.mark.asyncio
async def test_loading_while_cycle_outstanding():
    client = FakeChainClient([100], [make_block(number=100)], number_delays=[0.05])
    controller = PollingController(client, interval=LONG)

    controller.activate()
    await asyncio.sleep(0.01)
    assert controller.state.loading is True

    await controller.drain()
    assert controller.state.loading is False
    controller.deactivate()


@pytest.mark.asyncio
async def test_failure_after_success_keeps_block(caplog):
    block = make_block(number=100)
    client = FakeChainClient([100, ChainClientError("connection refused")], [block])
    controller = PollingController(client, interval=LONG)

    controller.activate()
    await settle(controller)
    with caplog.at_level(logging.ERROR, logger="blockdash.polling"):
        await controller.dispatch()

    state = controller.state
    assert isinstance(state, Failed)
    assert state.loading is False
    assert state.error == DEFAULT_ERROR_MESSAGE
    assert "connection refused" not in state.error
    assert state.block is block
    assert state.block_number == 100
    assert "Error fetching blockchain data" in caplog.text
    assert "connection refused" in caplog.text
    controller.deactivate()


@pytest.mark.asyncio
async def test_block_request_failure_fails_cycle():
    client = FakeChainClient([100], [ValueError("bad payload")])
    controller = PollingController(client, interval=LONG)

    controller.activate()
    await settle(controller)

    assert isinstance(controller.state, Failed)
    assert controller.state.block is None
    controller.deactivate()


@pytest.mark.asyncio
async def test_recovers_on_next_cycle():
    block = make_block(number=101)
    client = FakeChainClient([ChainClientError("down"), 101], [block])
    controller = PollingController(client, interval=LONG)

    controller.activate()
    await settle(controller)
    assert isinstance(controller.state, Failed)

    await controller.dispatch()
    assert isinstance(controller.state, Ready)
    assert controller.state.block_number == 101
    controller.deactivate()


@pytest.mark.asyncio
async def test_older_straggler_is_discarded():
    old, new = make_block(number=1), make_block(number=2)
    client = FakeChainClient([1, 2], [old, new], number_delays=[0.1, 0])
    controller = PollingController(client, interval=LONG)

    controller.activate()
    await asyncio.sleep(0.01)
    await controller.dispatch()
    assert controller.state.block is new

    await controller.drain()
    assert controller.state.block is new
    assert controller.state.block_number == 2
    controller.deactivate()


@pytest.mark.asyncio
async def test_newer_result_replaces_older_one():
    old, new = make_block(number=1), make_block(number=2)
    client = FakeChainClient([1, 2], [old, new], number_delays=[0, 0.05])
    controller = PollingController(client, interval=LONG)

    controller.activate()
    await settle(controller)
    assert controller.state.block is old

    await controller.dispatch()
    assert controller.state.block is new
    controller.deactivate()


@pytest.mark.asyncio
async def test_schedule_repeats_on_interval():
    client = FakeChainClient([100], [make_block(number=100)])
    controller = PollingController(client, interval=0.05)

    async with controller.running():
        await asyncio.sleep(0.12)
    await controller.drain()

    calls = client.number_calls
    assert calls >= 2
    await asyncio.sleep(0.1)
    assert client.number_calls == calls


@pytest.mark.asyncio
async def test_deactivate_discards_in_flight_result():
    client = FakeChainClient([100], [make_block(number=100)], number_delays=[0.05])
    controller = PollingController(client, interval=0.02)

    controller.activate()
    await asyncio.sleep(0.01)
    before = controller.state
    controller.deactivate()

    await controller.drain()
    await asyncio.sleep(0.05)
    assert controller.state is before
    assert client.number_calls == 1


@pytest.mark.asyncio
async def test_running_deactivates_on_error():
    controller = PollingController(FakeChainClient([1], [make_block(number=1)]), interval=LONG)

    with pytest.raises(RuntimeError):
        async with controller.running():
            assert controller.active
            raise RuntimeError("boom")

    assert not controller.active
    await controller.drain()


@pytest.mark.asyncio
async def test_reactivation_ignores_previous_activation():
    old, new = make_block(number=1), make_block(number=2)
    client = FakeChainClient([1, 2], [old, new], number_delays=[0.1, 0])
    controller = PollingController(client, interval=LONG)

    controller.activate()
    await asyncio.sleep(0.01)
    controller.deactivate()

    controller.activate()
    await asyncio.sleep(0)
    await controller.drain()

    assert controller.state.block is new
    controller.deactivate()
