import asyncio

from blockdash.chain_client import Block


def make_block(number=19_000_000, transactions=("0xaa", "0xbb"), **overrides) -> Block:
    fields = dict(
        number=number,
        timestamp=1700000000,
        miner="0x95222290DD7278Aa3Ddd389Cc1E1d165CC4BAfe5",
        hash="0x" + "11" * 32,
        parent_hash="0x" + "22" * 32,
        gas_used=15_000_000,
        gas_limit=30_000_000,
        transactions=tuple(transactions),
    )
    fields.update(overrides)
    return Block(**fields)


class FakeChainClient:
    """Scriptable stand-in for ChainClient.

    Each request pops the next entry of its own script: a value is returned,
    an exception is raised. The last entry repeats once a script runs out.
    ``number_delays`` holds per-call sleeps for the block number request.
    """

    def __init__(self, numbers, blocks, number_delays=()):
        self.numbers = list(numbers)
        self.blocks = list(blocks)
        self.number_delays = list(number_delays)
        self.number_calls = 0
        self.block_calls = 0
        self.closed = False

    @staticmethod
    def _pop(script):
        return script.pop(0) if len(script) > 1 else script[0]

    @staticmethod
    def _resolve(entry):
        if isinstance(entry, Exception):
            raise entry
        return entry

    async def get_block_number(self) -> int:
        self.number_calls += 1
        entry = self._pop(self.numbers)
        delay = self.number_delays.pop(0) if self.number_delays else 0
        if delay:
            await asyncio.sleep(delay)
        return self._resolve(entry)

    async def get_block_by_tag(self, tag: str) -> Block:
        self.block_calls += 1
        assert tag == "latest"
        return self._resolve(self._pop(self.blocks))

    async def close(self) -> None:
        self.closed = True
