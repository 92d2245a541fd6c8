"""Radio modulation enumerations and LoRaWAN timing and radio defaults."""

from __future__ import annotations

from enum import IntEnum


class Bandwidth(IntEnum):
    """LoRa channel bandwidth, valued in hertz."""

    KHZ_125 = 125_000
    KHZ_250 = 250_000
    KHZ_500 = 500_000

    @property
    def khz(self) -> int:
        return self.value // 1000


class SpreadingFactor(IntEnum):
    """LoRa spreading factor, valued by the factor itself."""

    SF5 = 5
    SF6 = 6
    SF7 = 7
    SF8 = 8
    SF9 = 9
    SF10 = 10
    SF11 = 11
    SF12 = 12


class CodingRate(IntEnum):
    """LoRa forward error correction rate 4/n, valued by the denominator n."""

    CR_4_5 = 5
    CR_4_6 = 6
    CR_4_7 = 7
    CR_4_8 = 8

    @property
    def ratio(self) -> tuple[int, int]:
        return (4, self.value)


RECEIVE_DELAY1 = 1000
RECEIVE_DELAY2 = RECEIVE_DELAY1 + 1000  # always one second after RX1
JOIN_ACCEPT_DELAY1 = 5000
JOIN_ACCEPT_DELAY2 = 6000
MAX_FCNT_GAP = 16384
ADR_ACK_LIMIT = 64
ADR_ACK_DELAY = 32
ACK_TIMEOUT = 2  # random delay between 1 and 3 seconds

DEFAULT_BANDWIDTH = Bandwidth.KHZ_125
DEFAULT_SPREADING_FACTOR = SpreadingFactor.SF7
DEFAULT_CODING_RATE = CodingRate.CR_4_5
DEFAULT_DBM = 14