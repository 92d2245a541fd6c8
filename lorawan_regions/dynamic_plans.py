"""Dynamic channel plans: regions whose extra channels come from the network.

Covers AS923 (groups 1 to 4), EU433, EU868, IN865 and KR920. Each region has
a few fixed join channels. Up to five more channels can be added through the
CFList of a join accept, and channels can be switched on or off through
LinkADRReq channel masks.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Union

from .constants import (
    DEFAULT_CODING_RATE,
    DEFAULT_DBM,
    Bandwidth,
    CodingRate,
    SpreadingFactor,
)
from .rng import Prng
from .types import (
    CF_LIST_CHANNELS,
    DR,
    ChannelMask,
    Datarate,
    DynamicCfList,
    Frame,
    Window,
    max_payload_length,
)

_JOIN_CHANNEL_BITS = 0b111


def _dr(sf: SpreadingFactor, bw: Bandwidth, size: int, dwell: int) -> Datarate:
    return Datarate(
        bandwidth=bw,
        spreading_factor=sf,
        max_mac_payload_size=size,
        max_mac_payload_size_with_dwell_time=dwell,
    )


_SF = SpreadingFactor
_BW = Bandwidth

_AS923_DATARATES: tuple[Optional[Datarate], ...] = (
    _dr(_SF.SF12, _BW.KHZ_125, 59, 0),
    _dr(_SF.SF11, _BW.KHZ_125, 59, 0),
    _dr(_SF.SF10, _BW.KHZ_125, 123, 19),
    _dr(_SF.SF9, _BW.KHZ_125, 123, 61),
    _dr(_SF.SF8, _BW.KHZ_125, 250, 133),
    _dr(_SF.SF7, _BW.KHZ_125, 250, 250),
    _dr(_SF.SF7, _BW.KHZ_250, 250, 250),
)

_EU433_DATARATES: tuple[Optional[Datarate], ...] = (
    _dr(_SF.SF12, _BW.KHZ_125, 59, 0),
    _dr(_SF.SF11, _BW.KHZ_125, 59, 0),
    _dr(_SF.SF10, _BW.KHZ_125, 123, 19),
    _dr(_SF.SF9, _BW.KHZ_125, 123, 61),
    _dr(_SF.SF8, _BW.KHZ_125, 250, 133),
    _dr(_SF.SF7, _BW.KHZ_125, 250, 250),
    _dr(_SF.SF7, _BW.KHZ_250, 250, 250),
)

_EU868_DATARATES: tuple[Optional[Datarate], ...] = (
    _dr(_SF.SF12, _BW.KHZ_125, 59, 59),
    _dr(_SF.SF11, _BW.KHZ_125, 59, 59),
    _dr(_SF.SF10, _BW.KHZ_125, 59, 59),
    _dr(_SF.SF9, _BW.KHZ_125, 123, 123),
    _dr(_SF.SF8, _BW.KHZ_125, 250, 250),
    _dr(_SF.SF7, _BW.KHZ_125, 250, 250),
    _dr(_SF.SF7, _BW.KHZ_250, 250, 250),
)

_IN865_DATARATES: tuple[Optional[Datarate], ...] = (
    _dr(_SF.SF12, _BW.KHZ_125, 59, 59),
    _dr(_SF.SF11, _BW.KHZ_125, 59, 59),
    _dr(_SF.SF10, _BW.KHZ_125, 59, 59),
    _dr(_SF.SF9, _BW.KHZ_125, 123, 123),
    _dr(_SF.SF8, _BW.KHZ_125, 250, 250),
    _dr(_SF.SF7, _BW.KHZ_125, 250, 250),
)

_KR920_DATARATES: tuple[Optional[Datarate], ...] = _IN865_DATARATES


@dataclass(frozen=True)
class DynamicRegionSpec:
    """Static description of a dynamic-channel region."""

    name: str
    join_channels: tuple[int, ...]
    default_rx2: int
    datarates: tuple[Optional[Datarate], ...]

    def __post_init__(self) -> None:
        if not self.join_channels:
            raise ValueError("a region needs at least one join channel")
        if len(self.join_channels) > _JOIN_CHANNEL_BITS + 1:
            raise ValueError("a region has at most eight join channels")


_AS923_JOIN = 923_200_000


def _as923(name: str, default_rx2: int, offset: int) -> DynamicRegionSpec:
    return DynamicRegionSpec(
        name=name,
        join_channels=(_AS923_JOIN + offset, _AS923_JOIN + offset),
        default_rx2=default_rx2,
        datarates=_AS923_DATARATES,
    )


AS923_1 = _as923("AS923_1", 923_200_000, 0)
AS923_2 = _as923("AS923_2", 921_400_000, 1_800_000)
AS923_3 = _as923("AS923_3", 916_600_000, 6_600_000)
AS923_4 = _as923("AS923_4", 917_300_000, 5_900_000)
EU433 = DynamicRegionSpec(
    name="EU433",
    join_channels=(433_175_000, 433_375_000, 433_575_000),
    default_rx2=434_665_000,
    datarates=_EU433_DATARATES,
)
EU868 = DynamicRegionSpec(
    name="EU868",
    join_channels=(868_100_000, 868_300_000, 868_500_000),
    default_rx2=869_525_000,
    datarates=_EU868_DATARATES,
)
IN865 = DynamicRegionSpec(
    name="IN865",
    join_channels=(865_062_500, 865_402_500, 865_985_000),
    default_rx2=866_550_000,
    datarates=_IN865_DATARATES,
)
KR920 = DynamicRegionSpec(
    name="KR920",
    join_channels=(922_100_000, 922_300_000, 922_500_000),
    default_rx2=921_900_000,
    datarates=_KR920_DATARATES,
)


class DynamicChannelPlan:
    """Channel selection state for a dynamic-channel region."""

    def __init__(self, spec: DynamicRegionSpec) -> None:
        self.spec = spec
        self._additional_channels: list[Optional[int]] = [None] * CF_LIST_CHANNELS
        self._channel_mask = ChannelMask()
        self._last_tx_channel = 0
        self._rx1_offset = 0
        self._rx2_dr = 0

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.spec.name})"

    # -- helpers -----------------------------------------------------------

    def _channel(self, channel: int) -> Optional[int]:
        joins = self.spec.join_channels
        if channel < len(joins):
            return joins[channel]
        index = channel - len(joins)
        if index < len(self._additional_channels):
            return self._additional_channels[index]
        return None

    def _selection_bits(self) -> int:
        highest = max(
            (i + 1 for i, freq in enumerate(self._additional_channels) if freq is not None),
            default=0,
        )
        span = highest + len(self.spec.join_channels)
        if span > 16:
            return 0b11111
        if span > 8:
            return 0b1111
        return 0b111

    def _usable(self, channel: int) -> bool:
        return self._channel_mask.is_enabled(channel) and self._channel(channel) is not None

    def _datarate(self, index: int) -> Datarate:
        rates = self.spec.datarates
        entry = rates[index] if 0 <= index < len(rates) else None
        if entry is None:
            raise ValueError(f"data rate {index} is not defined in {self.spec.name}")
        return entry

    # -- region interface --------------------------------------------------

    def max_payload_length(
        self, datarate: DR, repeater_compatible: bool, dwell_time: bool
    ) -> int:
        """Maximum MAC payload size for ``datarate``; 0 when it is undefined."""
        return max_payload_length(self.spec.datarates, datarate, repeater_compatible, dwell_time)

    def process_join_accept(self, cf_list: Union[DynamicCfList, ChannelMask, None]) -> None:
        """Apply the CFList of a join accept.

        A type 0 CFList defines the additional channels, a zero frequency
        leaving a slot unused. Other CFList types are ignored.
        """
        if isinstance(cf_list, DynamicCfList):
            self._additional_channels = [freq or None for freq in cf_list]

    def handle_link_adr_channel_mask(
        self, channel_mask_control: int, channel_mask: ChannelMask
    ) -> None:
        """Apply the channel mask of a LinkADRReq."""
        if 0 <= channel_mask_control <= 4:
            base = channel_mask_control * 2
            self._channel_mask.set_bank(base, channel_mask.get_index(0))
            self._channel_mask.set_bank(base + 1, channel_mask.get_index(1))
        elif channel_mask_control == 5:
            bits = channel_mask.get_index(0) | (channel_mask.get_index(1) << 8)
            for bank in range(9):
                self._channel_mask.set_bank(bank, ((bits & (1 << bank)) * 0xFF) & 0xFF)
        elif channel_mask_control == 6:
            for bank in range(8):
                self._channel_mask.set_bank(bank, 0xFF)
        # other values are reserved for future use

    def tx_dr_and_frequency(
        self, rng: Prng, datarate: DR, frame: Frame
    ) -> tuple[Datarate, int]:
        """Pick a channel for an uplink; return its data rate and frequency."""
        rate = self._datarate(int(datarate))
        if frame is Frame.JOIN:
            count = len(self.spec.join_channels)
            channel = rng.next_u32() & _JOIN_CHANNEL_BITS
            while channel >= count:
                channel = rng.next_u32() & _JOIN_CHANNEL_BITS
            self._last_tx_channel = channel
            return rate, self.spec.join_channels[channel]

        bits = self._selection_bits()
        if not any(self._usable(c) for c in range(bits + 1)):
            raise RuntimeError(f"no enabled channel available in {self.spec.name}")
        while True:
            channel = rng.next_u32() & bits
            if self._usable(channel):
                self._last_tx_channel = channel
                frequency = self._channel(channel)
                assert frequency is not None
                return rate, frequency

    def rx_frequency(self, frame: Frame, window: Window) -> int:
        """Downlink frequency of a receive window."""
        if window is Window.RX1:
            frequency = self._channel(self._last_tx_channel)
            if frequency is None:
                raise RuntimeError("the last uplink channel has no frequency")
            return frequency
        return self.spec.default_rx2

    def rx_datarate(self, datarate: DR, frame: Frame, window: Window) -> Datarate:
        """Downlink data rate of a receive window after an uplink at ``datarate``."""
        if window is Window.RX1:
            index = int(datarate) + self._rx1_offset
        else:
            index = self._rx2_dr
        return self._datarate(index)

    def default_datarate(self) -> DR:
        return DR.DR0

    def dbm(self) -> int:
        return DEFAULT_DBM

    def coding_rate(self) -> CodingRate:
        return DEFAULT_CODING_RATE