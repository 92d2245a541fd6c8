"""Join channel selection for fixed channel plans (US915, AU915).

Without a preferred subband, join requests cycle through the banks of eight
channels: a random channel on the bottom 64 first, then eight channels
further each time, wrapping around the 72 uplink channels. Once every bank
has been visited, a fresh random channel of the first bank is used. A
preferred subband can be set to bias the first attempts onto its channels.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol

from .types import ChannelMask, Subband

_TOTAL_CHANNELS = 72
_BANK_SIZE = 8
_ENTROPY_CHUNKS = 10  # 30 of the 32 bits, three bits at a time


class _Rng(Protocol):
    def next_u32(self) -> int: ...


@dataclass
class AvailableChannels:
    """Channels not yet attempted in the current join cycle."""

    data: ChannelMask = field(default_factory=ChannelMask)
    previous: Optional[int] = None

    def is_exhausted(self) -> bool:
        """Return True when every channel has been attempted."""
        return self.data.is_cleared()

    def get_next(self, rng: _Rng) -> int:
        """Pick the next join channel and mark it as attempted."""
        if self.is_exhausted():
            self.reset()
        channel = self._next_channel_inner(rng)
        self.data.set_channel(channel, False)
        self.previous = channel
        return channel

    def reset(self) -> None:
        """Make every channel available again."""
        self.data = ChannelMask()
        self.previous = None

    def _next_channel_inner(self, rng: _Rng) -> int:
        if self.previous is None:
            # any channel of the bottom 64; all are still available
            return (rng.next_u32() & 0xFF) & 0b111111

        candidate = (self.previous + _BANK_SIZE) % _TOTAL_CHANNELS
        if self.data.is_enabled(candidate):
            return candidate

        # Wrapped around to the first bank: pick a random free channel on it.
        bank = candidate // _BANK_SIZE
        base = bank * _BANK_SIZE
        if not any(self.data.is_enabled(c) for c in range(base, base + _BANK_SIZE)):
            raise RuntimeError(f"no channel left on bank {bank}")
        entropy = rng.next_u32()
        used = 1
        channel = (entropy & 0b111) + base
        while not self.data.is_enabled(channel):
            if used == _ENTROPY_CHUNKS:
                entropy = rng.next_u32()
                used = 0
            entropy >>= 3
            used += 1
            channel = (entropy & 0b111) + base
        return channel


@dataclass
class JoinChannels:
    """Join attempt state, with an optional bias towards one subband."""

    max_retries: int = 0
    num_retries: int = 0
    preferred_subband: Optional[Subband] = None
    available_channels: AvailableChannels = field(default_factory=AvailableChannels)
    previous_channel: int = 0

    def has_bias_and_not_exhausted(self) -> bool:
        """True while biased retries remain and no join has reset the state."""
        return (
            self.preferred_subband is not None
            and self.num_retries < self.max_retries
            and self.num_retries != 0
        )

    def first_data_channel(self, rng: _Rng) -> Optional[int]:
        """Return a random channel on the subband the join succeeded on.

        Clears the join bias. Returns None when there is no preferred subband
        or no join attempt has been made.
        """
        if self.preferred_subband is None or self.num_retries == 0:
            return None
        self.clear_join_bias()
        if self.previous_channel < 64:
            subband = self.previous_channel // _BANK_SIZE
        else:
            subband = self.previous_channel % _BANK_SIZE
        return (rng.next_u32() & 0b111) + subband * _BANK_SIZE

    def set_join_bias(self, subband: Subband, max_retries: int) -> None:
        """Prefer ``subband`` for the first ``max_retries`` join attempts."""
        if max_retries < 0:
            raise ValueError(f"max_retries must not be negative, got {max_retries}")
        self.preferred_subband = Subband(subband)
        self.max_retries = max_retries

    def clear_join_bias(self) -> None:
        self.preferred_subband = None
        self.max_retries = 0

    def reset(self) -> None:
        """Reset the attempt state; called once a join accept is received."""
        self.num_retries = 0
        self.available_channels = AvailableChannels()

    def next_channel(self, rng: _Rng) -> int:
        """Return the channel for the next join request."""
        subband = self.preferred_subband
        self.num_retries += 1
        if subband is None or self.num_retries > self.max_retries:
            return self.available_channels.get_next(rng)

        # random 125 kHz channel of the preferred subband
        channel = rng.next_u32() % _BANK_SIZE + (int(subband) - 1) * _BANK_SIZE
        if self.num_retries == self.max_retries:
            # Last biased try: start the standard cycle from this channel.
            self.available_channels.previous = channel
            self.available_channels.data.set_channel(channel, False)
        self.previous_channel = channel
        return channel