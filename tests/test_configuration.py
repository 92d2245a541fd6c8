import pytest

from lorawan_regions.configuration import Configuration, Region, create_plan
from lorawan_regions.constants import Bandwidth, CodingRate, SpreadingFactor
from lorawan_regions.dynamic_plans import EU868, DynamicChannelPlan
from lorawan_regions.fixed_plans import US915, US915_SPEC, FixedChannelPlan
from lorawan_regions.rng import Prng
from lorawan_regions.types import DR, ChannelMask, DynamicCfList, Frame, Subband, Window


@pytest.mark.parametrize("region", list(Region))
def test_region_round_trip(region):
    config = Configuration.from_region(region)
    assert config.region() is region


def test_create_plan_kinds():
    us = create_plan(Region.US915)
    au = create_plan(Region.AU915)
    eu = create_plan("EU868")
    assert isinstance(us, FixedChannelPlan)
    assert isinstance(au, FixedChannelPlan)
    assert isinstance(eu, DynamicChannelPlan)
    assert us.dbm() == 21
    assert au.dbm() == 21
    assert eu.dbm() == 14
    assert us.max_payload_length(DR.DR0, False, False) == 19
    assert au.rx_frequency(Frame.DATA, Window.RX2) == 923_300_000
    assert eu.rx_frequency(Frame.DATA, Window.RX2) == 869_525_000


def test_unknown_region_rejected():
    with pytest.raises(ValueError):
        create_plan("XX000")


def test_non_plan_rejected():
    with pytest.raises(TypeError):
        Configuration(Region.EU868)


def test_max_payload_length():
    eu = Configuration.from_region(Region.EU868)
    assert eu.max_payload_length(DR.DR0, False, False) == 59
    us = Configuration.from_region(Region.US915)
    assert us.max_payload_length(DR.DR4, True, False) == 230
    assert us.max_payload_length(DR.DR5, False, False) == 0


def test_defaults():
    eu = Configuration.from_region(Region.EU868)
    us = Configuration.from_region(Region.US915)
    assert eu.dbm() == 14
    assert us.dbm() == 21
    assert eu.default_datarate() is DR.DR0
    assert eu.coding_rate() is CodingRate.CR_4_5


def test_rx2_config_eu868():
    config = Configuration.from_region(Region.EU868)
    rf = config.rx_config(DR.DR0, Frame.DATA, Window.RX2)
    assert rf.frequency == 869_525_000
    assert rf.bb.spreading_factor is SpreadingFactor.SF12
    assert rf.bb.bandwidth is Bandwidth.KHZ_125
    assert config.rxc_config(DR.DR3) == rf


def test_join_tx_config_eu868():
    config = Configuration.from_region(Region.EU868)
    rng = Prng(7)
    for _ in range(20):
        tx = config.create_tx_config(rng, DR.DR0, Frame.JOIN)
        assert tx.rf.frequency in EU868.join_channels
        assert tx.pw == config.dbm()
        assert config.rx_frequency(Frame.JOIN, Window.RX1) == tx.rf.frequency


def test_dynamic_cf_list_channels_used():
    config = Configuration.from_region(Region.EU868)
    extra = (867_100_000, 867_300_000, 0, 0, 0)
    config.process_join_accept(DynamicCfList(extra))
    rng = Prng(3)
    allowed = set(EU868.join_channels) | {f for f in extra if f}
    seen = set()
    for _ in range(200):
        tx = config.create_tx_config(rng, DR.DR5, Frame.DATA)
        assert tx.rf.frequency in allowed
        seen.add(tx.rf.frequency)
    assert seen == allowed


def test_us915_rx1_follows_uplink():
    config = Configuration.from_region(Region.US915)
    rng = Prng(11)
    for _ in range(20):
        config.create_tx_config(rng, DR.DR0, Frame.DATA)
        assert config.rx_frequency(Frame.DATA, Window.RX1) in US915_SPEC.downlink_channels


def test_us915_invalid_rx1_datarate():
    config = Configuration.from_region(Region.US915)
    with pytest.raises(ValueError):
        config.rx_datarate(DR.DR5, Frame.DATA, Window.RX1)


def test_full_compliant_bias():
    us915 = US915()
    us915.set_join_bias(Subband.SB2)
    config = Configuration(us915)
    rng = Prng(42)
    tx = config.create_tx_config(rng, DR.DR0, Frame.JOIN)
    assert 903_900_000 <= tx.rf.frequency <= 905_300_000
    config.process_join_accept(None)
    tx = config.create_tx_config(rng, DR.DR0, Frame.DATA)
    assert 903_900_000 <= tx.rf.frequency <= 905_300_000


def test_full_non_compliant_bias():
    us915 = US915()
    us915.set_join_bias_and_noncompliant_retries(Subband.SB2, 8)
    config = Configuration(us915)
    rng = Prng(5)
    tx = config.create_tx_config(rng, DR.DR0, Frame.JOIN)
    assert 903_900_000 <= tx.rf.frequency <= 905_300_000
    config.process_join_accept(None)
    for _ in range(8):
        tx = config.create_tx_config(rng, DR.DR0, Frame.DATA)
        assert 903_900_000 <= tx.rf.frequency <= 905_300_000


def test_set_channel_mask_bank_selection():
    config = Configuration.from_region(Region.US915)
    config.set_channel_mask(5, ChannelMask([0b10, 0]))
    rng = Prng(9)
    allowed = set(US915_SPEC.uplink_channels[8:16])
    for _ in range(50):
        tx = config.create_tx_config(rng, DR.DR0, Frame.DATA)
        assert tx.rf.frequency in allowed


def test_all_125k_disabled_raises():
    config = Configuration.from_region(Region.US915)
    config.set_channel_mask(7, ChannelMask([0, 0]))
    with pytest.raises(RuntimeError):
        config.create_tx_config(Prng(1), DR.DR0, Frame.DATA)


def test_region_from_fixed_plan_instance():
    config = Configuration(US915())
    assert config.region() is Region.US915
    assert repr(config) == "Configuration(US915)"