# lorawan_regions

Regional parameters for LoRaWAN end devices. For each supported region the
package works out which data rate and frequency an uplink goes out on, and
which radio settings the RX1, RX2 and class C receive windows use.

Supported regions (`lorawan_regions.configuration.Region`): `AS923_1`,
`AS923_2`, `AS923_3`, `AS923_4`, `AU915`, `EU433`, `EU868`, `IN865`, `KR920`
and `US915`.

## Installing

```
pip install .
```

The package has no runtime dependencies.

## Modules

- `lorawan_regions.configuration`: `Region`, `create_plan` and
  `Configuration`, the entry point for everything below.
- `lorawan_regions.dynamic_plans`: `DynamicChannelPlan` and the
  `DynamicRegionSpec` values `AS923_1` to `AS923_4`, `EU433`, `EU868`,
  `IN865` and `KR920`.
- `lorawan_regions.fixed_plans`: `FixedChannelPlan`, `FixedRegionSpec` and
  the `US915` and `AU915` plans.
- `lorawan_regions.join_channels`: `JoinChannels` and `AvailableChannels`,
  the join channel cycle of the fixed plans.
- `lorawan_regions.types`: `DR`, `Frame`, `Window`, `Subband`, `Datarate`,
  `ChannelMask`, `DynamicCfList`, `ModulationParams`, `RfConfig`, `TxConfig`
  and `max_payload_length`.
- `lorawan_regions.constants`: `Bandwidth`, `SpreadingFactor`, `CodingRate`
  and LoRaWAN timing and radio defaults.
- `lorawan_regions.rng`: `Prng`, a seeded wyrand generator.

## Usage

Build a `Configuration` for a region and ask it for transmit and receive
settings. Random choices, such as the channel for the next uplink, come from
a `Prng` you seed yourself.

```python
from lorawan_regions.configuration import Configuration, Region
from lorawan_regions.rng import Prng
from lorawan_regions.types import DR, Frame, Window

config = Configuration.from_region(Region.EU868)
rng = Prng(42)

tx = config.create_tx_config(rng, DR.DR0, Frame.JOIN)   # TxConfig: pw (dBm) and rf
rx1 = config.rx_config(DR.DR0, Frame.JOIN, Window.RX1)  # RfConfig
rx2 = config.rx_config(DR.DR0, Frame.JOIN, Window.RX2)
rxc = config.rxc_config(DR.DR0)                         # same as RX2

print(tx.rf.frequency, tx.rf.bb.spreading_factor)
print(config.max_payload_length(DR.DR5, False, False))  # 250
```

`max_payload_length` returns 0 for a data rate the region does not define,
and caps the size at 230 bytes when `repeater_compatible` is true.
`rx_datarate` and `create_tx_config` raise `ValueError` for an undefined
data rate.

### Fixed channel plans and join bias

US915 and AU915 use fixed channel plans. To send the first join request on a
given subband, set a join bias before building the configuration:

```python
from lorawan_regions.configuration import Configuration
from lorawan_regions.fixed_plans import US915
from lorawan_regions.types import Subband

us915 = US915()
us915.set_join_bias(Subband.SB2)
config = Configuration(us915)
```

After the biased attempt, join requests follow the standard cycle through
the banks of eight channels. The first data uplink after a biased join goes
out on the subband the join was sent on.

`set_join_bias_and_noncompliant_retries(subband, max_retries)` keeps using
the preferred subband for up to `max_retries` attempts. More than one
attempt does not follow the LoRaWAN specification, and a network using other
channels could then never be joined, so keep the number small.
`clear_join_bias` removes the bias. `set_125k_channels(enabled)` switches all
125 kHz channels on or off.

### Network updates

Pass the CFList of a join accept to `Configuration.process_join_accept`:
a `DynamicCfList` of five frequencies in hertz (0 for an unused slot) for
dynamic plans, or a `ChannelMask` for fixed plans. Anything else is ignored.

```python
from lorawan_regions.types import ChannelMask, DynamicCfList

eu = Configuration.from_region(Region.EU868)
eu.process_join_accept(DynamicCfList((867_100_000, 867_300_000, 0, 0, 0)))
```

Pass the channel mask of a LinkADRReq to `Configuration.set_channel_mask`
together with its channel mask control value:

```python
config.set_channel_mask(5, ChannelMask([0b10, 0x00]))  # only bank 1 enabled
```

## What the package does not do

The package covers regional parameters only. It does not build, parse,
encrypt or verify LoRaWAN frames or MAC commands, keep session state, time
receive windows, or talk to a radio. The caller decodes CFLists and
LinkADRReq channel masks and hands them in as `DynamicCfList` and
`ChannelMask` values.

## Running the tests

```
pip install .[test]
pytest
```