"""Shared value types: data rates, frames, windows, channel masks and radio configs."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Iterable, Iterator, Optional, Sequence

from .constants import Bandwidth, CodingRate, SpreadingFactor

REPEATER_MAX_PAYLOAD = 230
CF_LIST_CHANNELS = 5
DEFAULT_MASK_SIZE = 9


class DR(IntEnum):
    """Data rate index. Not every index is valid in every region."""

    DR0 = 0
    DR1 = 1
    DR2 = 2
    DR3 = 3
    DR4 = 4
    DR5 = 5
    DR6 = 6
    DR7 = 7
    DR8 = 8
    DR9 = 9
    DR10 = 10
    DR11 = 11
    DR12 = 12
    DR13 = 13
    DR14 = 14
    DR15 = 15


class Frame(Enum):
    """Kind of uplink frame being sent."""

    JOIN = "join"
    DATA = "data"


class Window(Enum):
    """Receive window following an uplink."""

    RX1 = 1
    RX2 = 2


class Subband(IntEnum):
    """Group of eight 125 kHz channels in a fixed channel plan (US915, AU915)."""

    SB1 = 1
    SB2 = 2
    SB3 = 3
    SB4 = 4
    SB5 = 5
    SB6 = 6
    SB7 = 7
    SB8 = 8

    @property
    def channels(self) -> range:
        """Channel indices belonging to this subband."""
        return range((self.value - 1) * 8, self.value * 8)


@dataclass(frozen=True)
class Datarate:
    """Modulation and payload limits of one regional data rate."""

    bandwidth: Bandwidth
    spreading_factor: SpreadingFactor
    max_mac_payload_size: int
    max_mac_payload_size_with_dwell_time: int


def max_payload_length(
    datarates: Sequence[Optional[Datarate]],
    datarate: int,
    repeater_compatible: bool,
    dwell_time: bool,
) -> int:
    """Return the maximum MAC payload size for ``datarate`` in a data rate table.

    Undefined or missing data rates give 0. Repeater compatibility caps the
    result at 230 bytes.
    """
    index = int(datarate)
    if not 0 <= index < len(datarates):
        return 0
    entry = datarates[index]
    if entry is None:
        return 0
    size = entry.max_mac_payload_size_with_dwell_time if dwell_time else entry.max_mac_payload_size
    if repeater_compatible and size > REPEATER_MAX_PAYLOAD:
        return REPEATER_MAX_PAYLOAD
    return size


class ChannelMask:
    """Bit mask of enabled channels, eight channels per byte ("bank").

    Channel ``n`` is bit ``n % 8`` of byte ``n // 8``. A mask built without
    data has every channel enabled.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Optional[Iterable[int]] = None, size: Optional[int] = None) -> None:
        if size is not None and size <= 0:
            raise ValueError(f"size must be positive, got {size}")
        if data is None:
            self._data = bytearray([0xFF] * (DEFAULT_MASK_SIZE if size is None else size))
            return
        if isinstance(data, int):
            raise TypeError("data must be a sequence of byte values")
        raw = bytes(data)
        if size is None:
            size = len(raw)
        if size == 0:
            raise ValueError("a channel mask needs at least one byte")
        if len(raw) < size:
            raise ValueError(f"channel mask needs {size} bytes, got {len(raw)}")
        self._data = bytearray(raw[:size])

    def _check_bank(self, index: int) -> None:
        if not 0 <= index < len(self._data):
            raise IndexError(f"bank {index} out of range for a {len(self._data)}-byte mask")

    def _check_channel(self, channel: int) -> None:
        if not 0 <= channel < len(self._data) * 8:
            raise IndexError(f"channel {channel} out of range for a {len(self._data)}-byte mask")

    def set_bank(self, index: int, value: int) -> None:
        """Overwrite the eight channels of bank ``index`` with ``value``."""
        self._check_bank(index)
        if not 0 <= value <= 0xFF:
            raise ValueError(f"bank value must fit in a byte, got {value}")
        self._data[index] = value

    def get_index(self, index: int) -> int:
        """Return the byte holding bank ``index``."""
        self._check_bank(index)
        return self._data[index]

    def is_enabled(self, channel: int) -> bool:
        self._check_channel(channel)
        return bool(self._data[channel >> 3] & (1 << (channel & 0x07)))

    def set_channel(self, channel: int, enabled: bool) -> None:
        self._check_channel(channel)
        bit = 1 << (channel & 0x07)
        if enabled:
            self._data[channel >> 3] |= bit
        else:
            self._data[channel >> 3] &= ~bit & 0xFF

    def is_cleared(self) -> bool:
        """Return True when no channel is enabled."""
        return not any(self._data)

    def __bytes__(self) -> bytes:
        return bytes(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[int]:
        return iter(bytes(self._data))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ChannelMask):
            return NotImplemented
        return self._data == other._data

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({bytes(self._data)!r})"


@dataclass(frozen=True)
class DynamicCfList:
    """CFList of type 0: up to five extra channel frequencies in hertz, 0 meaning unused."""

    frequencies: tuple[int, ...]

    def __post_init__(self) -> None:
        values = tuple(int(f) for f in self.frequencies)
        if len(values) != CF_LIST_CHANNELS:
            raise ValueError(f"a CFList holds {CF_LIST_CHANNELS} frequencies, got {len(values)}")
        if any(f < 0 for f in values):
            raise ValueError("frequencies must not be negative")
        object.__setattr__(self, "frequencies", values)

    def __iter__(self) -> Iterator[int]:
        return iter(self.frequencies)


@dataclass(frozen=True)
class ModulationParams:
    """Base-band LoRa modulation parameters."""

    spreading_factor: SpreadingFactor
    bandwidth: Bandwidth
    coding_rate: CodingRate


@dataclass(frozen=True)
class RfConfig:
    """Frequency in hertz and modulation used for one transmission or reception."""

    frequency: int
    bb: ModulationParams

    def __post_init__(self) -> None:
        if self.frequency < 0:
            raise ValueError(f"frequency must not be negative, got {self.frequency}")


@dataclass(frozen=True)
class TxConfig:
    """Transmit power in dBm together with the radio configuration."""

    pw: int
    rf: RfConfig