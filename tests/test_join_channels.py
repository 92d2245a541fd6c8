import pytest

from lorawan_regions.join_channels import AvailableChannels, JoinChannels
from lorawan_regions.rng import Prng
from lorawan_regions.types import ChannelMask, Subband


class SequenceRng:
    """Returns the given values in order."""

    def __init__(self, *values):
        self._values = list(values)

    def next_u32(self):
        return self._values.pop(0)


SEEDS = list(range(100))


@pytest.mark.parametrize("seed", SEEDS)
def test_join_channels_standard(seed):
    rng = Prng(seed)
    join_channels = JoinChannels()
    first_channel = join_channels.next_channel(rng)
    assert first_channel < 64
    next_channel = join_channels.next_channel(rng)
    assert next_channel == first_channel + 8
    for _ in range(7):
        assert join_channels.next_channel(rng) < 72
    ninth_channel = join_channels.next_channel(rng)
    assert ninth_channel // 8 == first_channel // 8
    assert ninth_channel != first_channel


def test_join_channels_standard_exhausted():
    rng = Prng(12345)
    join_channels = JoinChannels()
    first_channel = join_channels.next_channel(rng)
    assert first_channel < 64
    next_channel = join_channels.next_channel(rng)
    assert next_channel == first_channel + 8
    for _ in range(6000):
        assert join_channels.next_channel(rng) < 72


@pytest.mark.parametrize("seed", SEEDS)
def test_join_channels_biased(seed):
    rng = Prng(seed)
    join_channels = JoinChannels()
    join_channels.set_join_bias(Subband.SB2, 1)
    first_channel = join_channels.next_channel(rng)
    assert 7 < first_channel < 16
    next_channel = join_channels.next_channel(rng)
    assert next_channel == first_channel + 8
    for _ in range(7):
        assert join_channels.next_channel(rng) < 72
    ninth_channel = join_channels.next_channel(rng)
    assert ninth_channel // 8 == first_channel // 8
    assert ninth_channel != first_channel


def test_available_channels_first_pick_uses_low_six_bits():
    channels = AvailableChannels()
    assert channels.get_next(SequenceRng(0x1FF)) == 63
    assert channels.previous == 63
    assert not channels.data.is_enabled(63)


def test_available_channels_steps_by_eight():
    channels = AvailableChannels()
    assert channels.get_next(SequenceRng(5)) == 5
    assert channels.get_next(SequenceRng()) == 13
    assert channels.get_next(SequenceRng()) == 21


def test_available_channels_wrap_uses_entropy_chunks():
    mask = ChannelMask([0x80] + [0xFF] * 8)
    channels = AvailableChannels(data=mask, previous=64)
    # first three bits select channel 0 (disabled), the next three channel 7
    assert channels.get_next(SequenceRng(0b111000)) == 7
    assert not channels.data.is_enabled(7)


def test_available_channels_refreshes_entropy_after_ten_chunks():
    mask = ChannelMask([0x08] + [0xFF] * 8)
    channels = AvailableChannels(data=mask, previous=64)
    assert channels.get_next(SequenceRng(0, 3 << 3)) == 3


def test_available_channels_empty_bank_raises():
    mask = ChannelMask([0x00] + [0xFF] * 8)
    channels = AvailableChannels(data=mask, previous=64)
    with pytest.raises(RuntimeError):
        channels.get_next(SequenceRng(0))


def test_available_channels_exhausted_resets():
    channels = AvailableChannels(data=ChannelMask([0] * 9), previous=10)
    assert channels.is_exhausted()
    assert channels.get_next(SequenceRng(2)) == 2
    assert not channels.is_exhausted()
    assert channels.previous == 2


def test_available_channels_reset():
    channels = AvailableChannels()
    channels.get_next(SequenceRng(4))
    channels.reset()
    assert channels.previous is None
    assert bytes(channels.data) == b"\xff" * 9


def test_bias_state_after_single_retry():
    join_channels = JoinChannels()
    join_channels.set_join_bias(Subband.SB2, 1)
    assert not join_channels.has_bias_and_not_exhausted()
    assert join_channels.next_channel(SequenceRng(3)) == 11
    assert join_channels.previous_channel == 11
    assert join_channels.available_channels.previous == 11
    assert not join_channels.has_bias_and_not_exhausted()


def test_noncompliant_retries_stay_on_subband():
    join_channels = JoinChannels()
    join_channels.set_join_bias(Subband.SB3, 3)
    assert join_channels.next_channel(SequenceRng(9)) == 17
    assert join_channels.has_bias_and_not_exhausted()
    assert join_channels.available_channels.previous is None
    assert join_channels.next_channel(SequenceRng(2)) == 18
    assert join_channels.has_bias_and_not_exhausted()
    assert join_channels.next_channel(SequenceRng(7)) == 23
    assert not join_channels.has_bias_and_not_exhausted()
    assert join_channels.next_channel(SequenceRng()) == 31


def test_first_data_channel_uses_join_subband_and_clears_bias():
    join_channels = JoinChannels()
    join_channels.set_join_bias(Subband.SB2, 1)
    join_channels.next_channel(SequenceRng(3))
    assert join_channels.first_data_channel(SequenceRng(2)) == 10
    assert join_channels.preferred_subband is None
    assert join_channels.max_retries == 0
    assert join_channels.first_data_channel(SequenceRng(2)) is None


def test_first_data_channel_for_500khz_channel():
    join_channels = JoinChannels()
    join_channels.set_join_bias(Subband.SB1, 1)
    join_channels.num_retries = 1
    join_channels.previous_channel = 66
    assert join_channels.first_data_channel(SequenceRng(1)) == 17


def test_first_data_channel_without_bias_or_attempt():
    join_channels = JoinChannels()
    assert join_channels.first_data_channel(SequenceRng(0)) is None
    join_channels.set_join_bias(Subband.SB2, 1)
    assert join_channels.first_data_channel(SequenceRng(0)) is None
    assert join_channels.preferred_subband is Subband.SB2


def test_reset_clears_retries_and_channels():
    join_channels = JoinChannels()
    join_channels.next_channel(SequenceRng(5))
    join_channels.next_channel(SequenceRng())
    assert join_channels.num_retries == 2
    join_channels.reset()
    assert join_channels.num_retries == 0
    assert join_channels.available_channels.previous is None
    assert bytes(join_channels.available_channels.data) == b"\xff" * 9


def test_clear_join_bias():
    join_channels = JoinChannels()
    join_channels.set_join_bias(Subband.SB8, 4)
    join_channels.clear_join_bias()
    assert join_channels.preferred_subband is None
    assert join_channels.max_retries == 0
    assert join_channels.next_channel(SequenceRng(60)) == 60


def test_negative_retries_rejected():
    with pytest.raises(ValueError):
        JoinChannels().set_join_bias(Subband.SB1, -1)