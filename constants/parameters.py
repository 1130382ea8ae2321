from dataclasses import dataclass
from enum import Enum

from constants.wgs84_constants import NS_PER_SEC


class ConversionMethod(Enum):
    ITERATIVE = 1
    CLOSED_FORM = 2


@dataclass
class TelemetryParameters:
    CHUNK_DURATION_NS: int = NS_PER_SEC  # Maximum gap inside one telemetry window
    MAX_ITERATIONS: int = 50  # Cap on the iterative latitude refinement
    DISPLAY_TIME_UNIT_NS: int = NS_PER_SEC  # Unit of the elapsed mission time

    conversion_method: ConversionMethod = ConversionMethod.ITERATIVE


# CLI spelling -> conversion method
CONVERSION_METHOD_NAMES: dict[str, ConversionMethod] = {
    "iterative": ConversionMethod.ITERATIVE,
    "closed-form": ConversionMethod.CLOSED_FORM,
}

LOG_PATH = "logs/telemetry_debug.log"
