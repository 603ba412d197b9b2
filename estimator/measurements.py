"""
Measurement types and unit aggregation.

A work item is priced per unit; its unit count comes from its surfaces.
Each surface is measured one of three ways: by area (sq ft), by length
(linear ft) or by count. It contributes the matching dimension field.
"""

import enum
import logging
import math

logger = logging.getLogger(__name__)


class MeasurementType(str, enum.Enum):
    AREA = "sqft"
    LINEAR = "linear-foot"
    BY_UNIT = "by-unit"


# Free-form spellings seen from the estimator UI and older records
MEASUREMENT_ALIASES = {
    "sqft": MeasurementType.AREA,
    "square-foot": MeasurementType.AREA,
    "square foot": MeasurementType.AREA,
    "single-surface": MeasurementType.AREA,
    "linear-foot": MeasurementType.LINEAR,
    "linear ft": MeasurementType.LINEAR,
    "linear": MeasurementType.LINEAR,
    "by-unit": MeasurementType.BY_UNIT,
    "by unit": MeasurementType.BY_UNIT,
    "unit": MeasurementType.BY_UNIT,
    "units": MeasurementType.BY_UNIT,
}

# Surface field holding the quantity for each measurement type
QUANTITY_FIELDS = {
    MeasurementType.AREA.value: "sqft",
    MeasurementType.LINEAR.value: "linear_ft",
    MeasurementType.BY_UNIT.value: "units",
}


def normalize_measurement_type(value) -> str:
    """Map any measurement spelling to its canonical value. Unrecognized → area."""
    if not value or not isinstance(value, str):
        return MeasurementType.AREA.value
    canonical = MEASUREMENT_ALIASES.get(value.strip().lower(), MeasurementType.AREA)
    return canonical.value


def to_number(value, default: float = 0.0) -> float:
    """Coerce user input to a finite float. Anything unparseable → default."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def _read(obj, field: str):
    if isinstance(obj, dict):
        # Stored records use the camelCase wire names
        camel = {"linear_ft": "linearFt", "measurement_type": "measurementType"}.get(field, field)
        return obj.get(camel, obj.get(field))
    return getattr(obj, field, None)


def get_units(item) -> float:
    """
    Total unit count for a work item, summed over its surfaces.

    Accepts either a WorkItem model or a stored work-item dict. A surface
    without its own measurement type uses the item's. By-unit counts are
    truncated to whole units. An unknown measurement type contributes 0.
    """
    if item is None:
        return 0.0
    surfaces = _read(item, "surfaces")
    if not isinstance(surfaces, (list, tuple)):
        return 0.0

    item_type = _read(item, "measurement_type")
    total = 0.0
    for surface in surfaces:
        if surface is None:
            continue
        mtype = _read(surface, "measurement_type") or item_type
        field = QUANTITY_FIELDS.get(mtype)
        if field is None:
            logger.warning("get_units: unknown measurement type %r on surface", mtype)
            continue
        quantity = to_number(_read(surface, field))
        if mtype == MeasurementType.BY_UNIT.value:
            quantity = float(math.trunc(quantity))
        total += quantity
    return total
