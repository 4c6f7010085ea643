"""Dashboard view state as an explicit tagged variant.

Each variant is immutable; the polling controller swaps whole values, so a
reader on another thread always sees a consistent snapshot. The four legacy
fields (``loading``, ``error``, ``block``, ``block_number``) are available
on every variant as properties.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from blockdash.chain_client import Block

DEFAULT_ERROR_MESSAGE = "Failed to load blockchain data. Please check your connection and API key."


@dataclass(frozen=True)
class Idle:
    loading = False
    error = None
    block = None
    block_number = None


@dataclass(frozen=True)
class Loading:
    previous: Block | None = None
    previous_number: int | None = None
    # message of the failure being retried, if any
    last_error: str | None = None

    loading = True
    error = None

    @property
    def block(self) -> Block | None:
        return self.previous

    @property
    def block_number(self) -> int | None:
        return self.previous_number


@dataclass(frozen=True)
class Ready:
    block: Block
    block_number: int

    loading = False
    error = None


@dataclass(frozen=True)
class Failed:
    message: str
    previous: Block | None = None
    previous_number: int | None = None

    loading = False

    @property
    def error(self) -> str:
        return self.message

    @property
    def block(self) -> Block | None:
        return self.previous

    @property
    def block_number(self) -> int | None:
        return self.previous_number


ViewState = Union[Idle, Loading, Ready, Failed]


def begin_fetch(state: ViewState) -> Loading:
    if isinstance(state, Failed):
        last_error = state.message
    elif isinstance(state, Loading):
        last_error = state.last_error
    else:
        last_error = None
    return Loading(previous=state.block, previous_number=state.block_number, last_error=last_error)


def apply_success(state: ViewState, block_number: int, block: Block) -> Ready:
    return Ready(block=block, block_number=block_number)


def apply_failure(state: ViewState, message: str = DEFAULT_ERROR_MESSAGE) -> Failed:
    return Failed(message=message, previous=state.block, previous_number=state.block_number)
