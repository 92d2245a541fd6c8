"""Region configuration: selects a channel plan and builds radio configs from it."""

from __future__ import annotations

from enum import Enum
from typing import Union

from .constants import CodingRate
from .dynamic_plans import (
    AS923_1,
    AS923_2,
    AS923_3,
    AS923_4,
    EU433,
    EU868,
    IN865,
    KR920,
    DynamicChannelPlan,
    DynamicRegionSpec,
)
from .fixed_plans import AU915, US915, FixedChannelPlan
from .rng import Prng
from .types import (
    DR,
    ChannelMask,
    Datarate,
    DynamicCfList,
    Frame,
    ModulationParams,
    RfConfig,
    TxConfig,
    Window,
)

ChannelPlan = Union[DynamicChannelPlan, FixedChannelPlan]


class Region(Enum):
    """Regions supported by this package."""

    AS923_1 = "AS923_1"
    AS923_2 = "AS923_2"
    AS923_3 = "AS923_3"
    AS923_4 = "AS923_4"
    AU915 = "AU915"
    EU868 = "EU868"
    EU433 = "EU433"
    IN865 = "IN865"
    KR920 = "KR920"
    US915 = "US915"


_DYNAMIC_SPECS: dict[Region, DynamicRegionSpec] = {
    Region.AS923_1: AS923_1,
    Region.AS923_2: AS923_2,
    Region.AS923_3: AS923_3,
    Region.AS923_4: AS923_4,
    Region.EU868: EU868,
    Region.EU433: EU433,
    Region.IN865: IN865,
    Region.KR920: KR920,
}


def create_plan(region: Union[Region, str]) -> ChannelPlan:
    """Return a fresh channel plan with default state for ``region``."""
    region = Region(region)
    if region is Region.US915:
        return US915()
    if region is Region.AU915:
        return AU915()
    return DynamicChannelPlan(_DYNAMIC_SPECS[region])


class Configuration:
    """Region-specific configuration needed to run a LoRaWAN device.

    Usually built with :meth:`from_region`; build it from a plan directly to
    fine-tune a region first, for example to set a join bias on US915.
    """

    def __init__(self, plan: ChannelPlan) -> None:
        if not isinstance(plan, (DynamicChannelPlan, FixedChannelPlan)):
            raise TypeError(f"expected a channel plan, got {type(plan).__name__}")
        self.plan = plan

    @classmethod
    def from_region(cls, region: Union[Region, str]) -> "Configuration":
        return cls(create_plan(region))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.region().value})"

    def region(self) -> Region:
        """The region the current plan belongs to."""
        return Region(self.plan.spec.name)

    def max_payload_length(
        self, datarate: DR, repeater_compatible: bool, dwell_time: bool
    ) -> int:
        return self.plan.max_payload_length(datarate, repeater_compatible, dwell_time)

    def _modulation(self, rate: Datarate) -> ModulationParams:
        return ModulationParams(
            spreading_factor=rate.spreading_factor,
            bandwidth=rate.bandwidth,
            coding_rate=self.coding_rate(),
        )

    def create_tx_config(self, rng: Prng, datarate: DR, frame: Frame) -> TxConfig:
        """Select an uplink channel and return the transmit configuration for it."""
        rate, frequency = self.plan.tx_dr_and_frequency(rng, datarate, frame)
        return TxConfig(pw=self.dbm(), rf=RfConfig(frequency, self._modulation(rate)))

    def rx_config(self, datarate: DR, frame: Frame, window: Window) -> RfConfig:
        """Radio configuration of a receive window after an uplink at ``datarate``."""
        rate = self.rx_datarate(datarate, frame, window)
        return RfConfig(self.rx_frequency(frame, window), self._modulation(rate))

    def rxc_config(self, datarate: DR) -> RfConfig:
        """Class C continuous receive configuration; identical to RX2."""
        return self.rx_config(datarate, Frame.DATA, Window.RX2)

    def process_join_accept(self, cf_list: Union[DynamicCfList, ChannelMask, None]) -> None:
        self.plan.process_join_accept(cf_list)

    def set_channel_mask(self, channel_mask_control: int, channel_mask: ChannelMask) -> None:
        self.plan.handle_link_adr_channel_mask(channel_mask_control, channel_mask)

    def rx_frequency(self, frame: Frame, window: Window) -> int:
        return self.plan.rx_frequency(frame, window)

    def rx_datarate(self, datarate: DR, frame: Frame, window: Window) -> Datarate:
        return self.plan.rx_datarate(datarate, frame, window)

    def default_datarate(self) -> DR:
        return self.plan.default_datarate()

    def dbm(self) -> int:
        return self.plan.dbm()

    def coding_rate(self) -> CodingRate:
        return self.plan.coding_rate()