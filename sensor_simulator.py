"""
Sensor Simulator - Random-walk telemetry for the demo fleet

Each call perturbs every channel independently with a bounded offset around
the previous value. Floors keep physically impossible readings out.
"""

import random
from typing import Optional

from fleet_models import Sample, utc_now

# channel: (offset_low, offset_high, floor)
RANDOM_WALK = {
    "temperature": (-1.8, 2.2, 20.0),
    "vibration": (-0.045, 0.055, 0.01),
    "pressure": (-2.5, 2.5, 10.0),
    "rpm": (-10.0, 10.0, None),
}

OPERATING_HOURS_STEP = 0.01

_default_rng = random.Random()


def _walk(rng: random.Random, channel: str, current: float) -> float:
    low, high, floor = RANDOM_WALK[channel]
    value = current + rng.uniform(low, high)
    if floor is not None:
        value = max(floor, value)
    return value


def next_sample(sample: Sample, rng: Optional[random.Random] = None) -> Sample:
    """
    Produce the next telemetry sample from the current one.

    Args:
        sample: Current reading
        rng: Random source (module-level generator if None)

    Returns:
        New Sample stamped with the current UTC time
    """
    rng = rng or _default_rng
    return Sample(
        temperature=_walk(rng, "temperature", sample.temperature),
        vibration=_walk(rng, "vibration", sample.vibration),
        pressure=_walk(rng, "pressure", sample.pressure),
        rpm=_walk(rng, "rpm", sample.rpm),
        operating_hours=sample.operating_hours + OPERATING_HOURS_STEP,
        timestamp=utc_now(),
    )


class SensorSimulator:
    """Holds a random source so a seeded fleet replays identically"""

    def __init__(self, seed: Optional[int] = None):
        self.rng = random.Random(seed)

    def next(self, sample: Sample) -> Sample:
        return next_sample(sample, self.rng)
