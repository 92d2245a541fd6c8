"""Fixed channel plans: regions with a fixed table of 72 uplink channels.

Covers US915 and AU915. Uplink channels 0 to 63 are 125 kHz channels grouped
in banks of eight, channels 64 to 71 are 500 kHz channels. The downlink
channel for RX1 is chosen by the uplink channel modulo eight.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from .constants import DEFAULT_CODING_RATE, Bandwidth, CodingRate, SpreadingFactor
from .join_channels import JoinChannels
from .rng import Prng
from .types import (
    DR,
    ChannelMask,
    Datarate,
    DynamicCfList,
    Frame,
    Subband,
    Window,
    max_payload_length,
)

_UPLINK_CHANNELS = 72
_DOWNLINK_CHANNELS = 8
_MASK_BANKS = 9
_FIRST_500K_CHANNEL = 64


def _dr(sf: SpreadingFactor, bw: Bandwidth, size: int, dwell: int) -> Datarate:
    return Datarate(
        bandwidth=bw,
        spreading_factor=sf,
        max_mac_payload_size=size,
        max_mac_payload_size_with_dwell_time=dwell,
    )


_SF = SpreadingFactor
_BW = Bandwidth


@dataclass(frozen=True)
class FixedRegionSpec:
    """Static description of a fixed-channel region."""

    name: str
    uplink_channels: tuple[int, ...]
    downlink_channels: tuple[int, ...]
    default_rx2: int
    datarates: tuple[Optional[Datarate], ...]
    rx1_datarates: tuple[DR, ...]
    dbm: int

    def __post_init__(self) -> None:
        if len(self.uplink_channels) != _UPLINK_CHANNELS:
            raise ValueError(f"a fixed plan has {_UPLINK_CHANNELS} uplink channels")
        if len(self.downlink_channels) != _DOWNLINK_CHANNELS:
            raise ValueError(f"a fixed plan has {_DOWNLINK_CHANNELS} downlink channels")

    def datarate(self, index: int) -> Datarate:
        """Return the data rate at ``index``; raise ValueError if it is undefined."""
        entry = self.datarates[index] if 0 <= index < len(self.datarates) else None
        if entry is None:
            raise ValueError(f"data rate {index} is not defined in {self.name}")
        return entry

    def rx_datarate(self, tx_datarate: DR, window: Window) -> Datarate:
        """Downlink data rate of a receive window; RX1 has no offset support."""
        if window is Window.RX1:
            index = int(tx_datarate)
            if not 0 <= index < len(self.rx1_datarates):
                raise ValueError(f"invalid TX data rate {index} for {self.name}")
            return self.datarate(int(self.rx1_datarates[index]))
        return self.datarate(int(DR.DR8))


_US915_UPLINK = tuple(902_300_000 + 200_000 * i for i in range(64)) + tuple(
    903_000_000 + 1_600_000 * i for i in range(8)
)
_AU915_UPLINK = tuple(915_200_000 + 200_000 * i for i in range(64)) + tuple(
    915_900_000 + 1_600_000 * i for i in range(8)
)
_US915_DOWNLINK = tuple(923_300_000 + 600_000 * i for i in range(8))
_AU915_DOWNLINK = (922_300_000,) + tuple(923_900_000 + 600_000 * i for i in range(7))

_US915_DATARATES: tuple[Optional[Datarate], ...] = (
    _dr(_SF.SF10, _BW.KHZ_125, 19, 19),
    _dr(_SF.SF9, _BW.KHZ_125, 61, 61),
    _dr(_SF.SF8, _BW.KHZ_125, 133, 133),
    _dr(_SF.SF7, _BW.KHZ_125, 250, 250),
    _dr(_SF.SF8, _BW.KHZ_500, 250, 250),
    None,
    None,
    None,
    _dr(_SF.SF12, _BW.KHZ_500, 61, 61),
    _dr(_SF.SF11, _BW.KHZ_500, 137, 137),
    _dr(_SF.SF10, _BW.KHZ_500, 250, 250),
    _dr(_SF.SF9, _BW.KHZ_500, 250, 250),
    _dr(_SF.SF8, _BW.KHZ_500, 250, 250),
    _dr(_SF.SF7, _BW.KHZ_500, 250, 250),
)

_AU915_DATARATES: tuple[Optional[Datarate], ...] = (
    _dr(_SF.SF12, _BW.KHZ_125, 59, 0),
    _dr(_SF.SF11, _BW.KHZ_125, 59, 0),
    _dr(_SF.SF10, _BW.KHZ_125, 59, 19),
    _dr(_SF.SF9, _BW.KHZ_125, 123, 61),
    _dr(_SF.SF8, _BW.KHZ_125, 250, 133),
    _dr(_SF.SF7, _BW.KHZ_125, 250, 250),
    _dr(_SF.SF8, _BW.KHZ_500, 250, 250),
    None,  # LR-FHSS, not supported
    _dr(_SF.SF12, _BW.KHZ_500, 61, 61),
    _dr(_SF.SF11, _BW.KHZ_500, 137, 137),
    _dr(_SF.SF10, _BW.KHZ_500, 250, 250),
    _dr(_SF.SF9, _BW.KHZ_500, 250, 250),
    _dr(_SF.SF8, _BW.KHZ_500, 250, 250),
    _dr(_SF.SF7, _BW.KHZ_500, 250, 250),
    None,
    None,
)

US915_SPEC = FixedRegionSpec(
    name="US915",
    uplink_channels=_US915_UPLINK,
    downlink_channels=_US915_DOWNLINK,
    default_rx2=923_300_000,
    datarates=_US915_DATARATES,
    rx1_datarates=(DR.DR10, DR.DR11, DR.DR12, DR.DR13, DR.DR13),
    dbm=21,
)

AU915_SPEC = FixedRegionSpec(
    name="AU915",
    uplink_channels=_AU915_UPLINK,
    downlink_channels=_AU915_DOWNLINK,
    default_rx2=923_300_000,
    datarates=_AU915_DATARATES,
    rx1_datarates=(
        DR.DR8,
        DR.DR9,
        DR.DR10,
        DR.DR11,
        DR.DR12,
        DR.DR13,
        DR.DR13,
        DR.DR9,
    ),
    dbm=21,
)


class FixedChannelPlan:
    """Channel selection state for a fixed-channel region."""

    def __init__(self, spec: FixedRegionSpec) -> None:
        self.spec = spec
        self._last_tx_channel = 0
        self._channel_mask = ChannelMask(size=_MASK_BANKS)
        self.join_channels = JoinChannels()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.spec.name})"

    # -- helpers -----------------------------------------------------------

    @staticmethod
    def _join_datarate(channel: int) -> DR:
        return DR.DR0 if channel < _FIRST_500K_CHANNEL else DR.DR4

    def _random_enabled(self, rng: Prng, bits: int) -> int:
        if not any(self._channel_mask.is_enabled(c) for c in range(bits + 1)):
            raise RuntimeError(f"no enabled channel available in {self.spec.name}")
        channel = rng.next_u32() & bits
        while not self._channel_mask.is_enabled(channel):
            channel = rng.next_u32() & bits
        return channel

    # -- tuning ------------------------------------------------------------

    def set_125k_channels(self, enabled: bool) -> None:
        """Enable or disable all 125 kHz channels (banks 0 to 7)."""
        value = 0xFF if enabled else 0x00
        for bank in range(8):
            self._channel_mask.set_bank(bank, value)

    def set_join_bias(self, subband: Subband) -> None:
        """Make the first join attempt on ``subband``; later ones follow the standard cycle."""
        self.join_channels.set_join_bias(subband, 1)

    def set_join_bias_and_noncompliant_retries(self, subband: Subband, max_retries: int) -> None:
        """Make the first ``max_retries`` join attempts on ``subband``.

        More than one attempt is not compliant with the LoRaWAN specification;
        a network using other channels could then never be joined.
        """
        self.join_channels.set_join_bias(subband, max_retries)

    def clear_join_bias(self) -> None:
        self.join_channels.clear_join_bias()

    # -- region interface --------------------------------------------------

    def max_payload_length(
        self, datarate: DR, repeater_compatible: bool, dwell_time: bool
    ) -> int:
        """Maximum MAC payload size for ``datarate``; 0 when it is undefined."""
        return max_payload_length(self.spec.datarates, datarate, repeater_compatible, dwell_time)

    def process_join_accept(self, cf_list: Union[ChannelMask, DynamicCfList, None]) -> None:
        """Apply the CFList of a join accept; only a type 1 channel mask is used."""
        if isinstance(cf_list, ChannelMask):
            self.join_channels.reset()
            self._channel_mask = ChannelMask(bytes(cf_list), _MASK_BANKS)

    def handle_link_adr_channel_mask(
        self, channel_mask_control: int, channel_mask: ChannelMask
    ) -> None:
        """Apply the channel mask of a LinkADRReq."""
        self.join_channels.reset()
        if 0 <= channel_mask_control <= 4:
            base = channel_mask_control * 2
            self._channel_mask.set_bank(base, channel_mask.get_index(0))
            self._channel_mask.set_bank(base + 1, channel_mask.get_index(1))
        elif channel_mask_control == 5:
            bits = channel_mask.get_index(0) | (channel_mask.get_index(1) << 8)
            for bank in range(_MASK_BANKS):
                self._channel_mask.set_bank(bank, ((bits & (1 << bank)) * 0xFF) & 0xFF)
        elif channel_mask_control == 6:
            self.set_125k_channels(True)
        elif channel_mask_control == 7:
            self.set_125k_channels(False)
        # other values are reserved for future use

    def tx_dr_and_frequency(
        self, rng: Prng, datarate: DR, frame: Frame
    ) -> tuple[Datarate, int]:
        """Pick a channel for an uplink; return its data rate and frequency."""
        if frame is Frame.JOIN:
            channel = self.join_channels.next_channel(rng)
            rate = self.spec.datarate(int(self._join_datarate(channel)))
            self._last_tx_channel = channel
            return rate, self.spec.uplink_channels[channel]

        if self.join_channels.has_bias_and_not_exhausted():
            # The bias still holds until a CFList or LinkADRReq resets it.
            channel = self.join_channels.next_channel(rng)
            rate = self.spec.datarate(int(self._join_datarate(channel)))
        else:
            first = self.join_channels.first_data_channel(rng)
            rate = self.spec.datarate(int(datarate))
            if first is not None:
                channel = first
            elif rate.bandwidth is Bandwidth.KHZ_500:
                channel = _FIRST_500K_CHANNEL + self._random_enabled(rng, 0b111)
            else:
                channel = self._random_enabled(rng, 0b111111)
        self._last_tx_channel = channel
        return rate, self.spec.uplink_channels[channel]

    def rx_frequency(self, frame: Frame, window: Window) -> int:
        """Downlink frequency of a receive window."""
        if window is Window.RX1:
            return self.spec.downlink_channels[self._last_tx_channel % _DOWNLINK_CHANNELS]
        return self.spec.default_rx2

    def rx_datarate(self, datarate: DR, frame: Frame, window: Window) -> Datarate:
        """Downlink data rate of a receive window after an uplink at ``datarate``."""
        return self.spec.rx_datarate(datarate, window)

    def default_datarate(self) -> DR:
        return DR.DR0

    def dbm(self) -> int:
        return self.spec.dbm

    def coding_rate(self) -> CodingRate:
        return DEFAULT_CODING_RATE


class US915(FixedChannelPlan):
    """US915 region state; create it directly to set a join bias."""

    def __init__(self) -> None:
        super().__init__(US915_SPEC)


class AU915(FixedChannelPlan):
    """AU915 region state; create it directly to set a join bias."""

    def __init__(self) -> None:
        super().__init__(AU915_SPEC)