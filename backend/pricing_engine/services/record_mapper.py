"""Record mapper.

Normalises a raw per-window record, as stored by the surrounding application,
into the canonical WindowTreatmentInput. Older records use different key
names (measurement_a for the rail width, price_per_meter, fabric_width_cm...)
and lengths in whatever unit the account uses. This is the only place that
knows about those names, and the only place lengths are converted to metres.

Keys with a unit suffix (_mm, _cm, _m) are read in that unit; everything else
is read in the record's unit.

Example record:
    {
        "id": "w1",
        "measurement_a": 200, "measurement_b": 250,
        "header_hem": 8, "bottom_hem": 15, "seam_hems": 1.5, "waste_percent": 5,
        "fabric": {"price_per_meter": 45, "fabric_width_cm": 140},
        "manufacturing_type": "machine",
    }
"""

import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..models.grid import GridDropRow, PricingGrid
from ..models.measurement import LengthUnit, Measurement
from ..models.pricing import WindowTreatmentInput
from ..models.selection import (
    FabricItem,
    HeadingSelection,
    LiningSelection,
    ManufacturingType,
    OptionPricingMethod,
    TreatmentOption,
)
from ..utils.errors import ErrorCode, InvalidMeasurementError, raise_error
from ..utils.money import clean_length
from .service_factory import service_factory
from .unit_converter import UnitLike, get_unit_converter

logger = logging.getLogger(__name__)

# (key, unit override); None means "the record's unit"
AliasList = Sequence[Tuple[str, Optional[str]]]

RAIL_WIDTH_KEYS: AliasList = (
    ("rail_width", None), ("rail_width_cm", "cm"), ("rail_width_mm", "mm"),
    ("measurement_a", None), ("track_width", None), ("width", None),
)
DROP_KEYS: AliasList = (
    ("drop", None), ("drop_cm", "cm"), ("drop_mm", "mm"),
    ("measurement_b", None), ("height", None),
)
POOLING_KEYS: AliasList = (
    ("pooling", None), ("pooling_cm", "cm"), ("pooling_amount_cm", "cm"), ("pooling_amount", None),
)
HEADER_KEYS: AliasList = (
    ("header_allowance", None), ("header_allowance_cm", "cm"), ("header_hem_cm", "cm"),
    ("header_hem", None),
)
BOTTOM_HEM_KEYS: AliasList = (("bottom_hem", None), ("bottom_hem_cm", "cm"))
SIDE_HEM_KEYS: AliasList = (
    ("side_hem", None), ("side_hems_cm", "cm"), ("side_hems", None),
)
SEAM_HEM_KEYS: AliasList = (
    ("seam_hem", None), ("seam_hems_cm", "cm"), ("seam_hems", None),
)
RETURN_LEFT_KEYS: AliasList = (
    ("return_left", None), ("return_left_cm", "cm"), ("return_left_mm", "mm"),
)
RETURN_RIGHT_KEYS: AliasList = (
    ("return_right", None), ("return_right_cm", "cm"), ("return_right_mm", "mm"),
)
OVERLAP_KEYS: AliasList = (("overlap", None), ("overlap_cm", "cm"), ("overlap_mm", "mm"))

FABRIC_WIDTH_KEYS: AliasList = (
    ("fabric_width_m", "m"), ("fabric_width_cm", "cm"), ("width_cm", "cm"),
    ("fabric_width", None), ("width", None),
)
VERTICAL_REPEAT_KEYS: AliasList = (
    ("vertical_repeat", None), ("vertical_repeat_cm", "cm"), ("pattern_repeat_vertical", None),
    ("pattern_repeat_vertical_cm", "cm"), ("repeat_vertical", None), ("pattern_repeat", None),
)
HORIZONTAL_REPEAT_KEYS: AliasList = (
    ("horizontal_repeat", None), ("horizontal_repeat_cm", "cm"),
    ("pattern_repeat_horizontal", None), ("pattern_repeat_horizontal_cm", "cm"),
    ("repeat_horizontal", None),
)
PRICE_KEYS = ("price_per_metre", "price_per_meter", "unit_price", "selling_price", "price")

GRID_METHOD_NAMES = ("pricing_grid", "pricing-grid", "grid")

OPTION_METHOD_ALIASES: Dict[str, OptionPricingMethod] = {
    "fixed": OptionPricingMethod.FIXED,
    "flat": OptionPricingMethod.FIXED,
    "per-unit": OptionPricingMethod.PER_UNIT,
    "per-item": OptionPricingMethod.PER_UNIT,
    "per-metre": OptionPricingMethod.PER_METRE,
    "per-meter": OptionPricingMethod.PER_METRE,
    "per-linear-metre": OptionPricingMethod.PER_METRE,
    "per-linear-meter": OptionPricingMethod.PER_METRE,
    "per-running-metre": OptionPricingMethod.PER_METRE,
    "per-running-meter": OptionPricingMethod.PER_METRE,
    "per-sqm": OptionPricingMethod.PER_SQM,
    "per-square-metre": OptionPricingMethod.PER_SQM,
    "per-square-meter": OptionPricingMethod.PER_SQM,
    "per-drop": OptionPricingMethod.PER_DROP,
    "per-panel": OptionPricingMethod.PER_PANEL,
    "per-curtain": OptionPricingMethod.PER_PANEL,
    "per-width": OptionPricingMethod.PER_WIDTH,
    "percentage": OptionPricingMethod.PERCENTAGE,
    "percent": OptionPricingMethod.PERCENTAGE,
    "pricing-grid": OptionPricingMethod.PRICING_GRID,
    "grid": OptionPricingMethod.PRICING_GRID,
}


def _to_number(key: str, value: Any) -> Optional[float]:
    """Parse a numeric field; blank values count as absent."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    if not text:
        return None
    try:
        return float(text)
    except ValueError:
        raise_error(
            ErrorCode.VALIDATION_ERROR,
            f"{key} is not a number (got {value!r})",
            status_code=422,
            details={"field": key, "value": value},
        )


def pick(record: Mapping[str, Any], keys: Sequence[str]) -> Optional[float]:
    """First numeric value found under any of the keys."""
    for key in keys:
        number = _to_number(key, record.get(key))
        if number is not None:
            return number
    return None


def window_pricing_method(name: str) -> str:
    """Canonical fabric pricing method for a stored method name."""
    if name in ("per_sqm", "per-sqm", "sqm"):
        return "per_sqm"
    if name in GRID_METHOD_NAMES:
        return "pricing_grid"
    return "per_metre"


def _grid_number(value: Any) -> float:
    """Grid cell or band value; stored grids may hold strings such as '£120' or '150cm'."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    try:
        return float(re.sub(r"[^0-9.\-]", "", str(value)))
    except ValueError:
        return 0.0


def _grid_unit(data: Mapping[str, Any], widths: Sequence[float], drops: Sequence[float]) -> LengthUnit:
    """Explicit grid unit, else mm when any band reaches 500 and cm otherwise."""
    unit = str(data.get("unit") or "").strip().lower()
    if unit in ("mm", "cm", "m"):
        return LengthUnit(unit)
    return LengthUnit.MILLIMETRE if max([*widths, *drops], default=0) >= 500 else LengthUnit.CENTIMETRE


def map_pricing_grid(raw: Any) -> Optional[PricingGrid]:
    """
    PricingGrid from a stored grid, whatever layout it was saved in.

    Accepted layouts:
        {"widthColumns": [...], "dropRows": [{"drop": d, "prices": [...]}], "unit": "cm"}
        {"width_columns": [...], "drop_rows": [{"drop": d, "prices": [...]}]}
        {"widthRanges": [...], "dropRanges": [...], "prices": [[...], ...]}
        {"widths": [...], "heights": [...], "prices": [[...], ...]}
        {"widthColumns": [...], "dropRows": [d, ...], "prices": {"<width>_<drop>": p}}

    Bands are sorted ascending. Returns None when nothing usable is stored.
    """
    if not isinstance(raw, Mapping):
        return None

    widths_raw = raw.get("widthColumns") or raw.get("width_columns") or raw.get("widthRanges") or raw.get("widths")
    drops_raw = raw.get("dropRows") or raw.get("drop_rows") or raw.get("dropRanges") or raw.get("heights")
    if not widths_raw or not drops_raw:
        logger.warning("Pricing grid has no width or drop bands; ignored")
        return None

    widths = [_grid_number(w) for w in widths_raw]
    prices = raw.get("prices")
    rows: List[Tuple[float, List[float]]] = []
    for index, entry in enumerate(drops_raw):
        if isinstance(entry, Mapping):
            rows.append((_grid_number(entry.get("drop")), [_grid_number(p) for p in entry.get("prices") or []]))
            continue
        drop = _grid_number(entry)
        if isinstance(prices, Mapping):
            cells = []
            for width in widths:
                w, d = f"{width:g}", f"{drop:g}"
                cell = prices.get(f"{w}_{d}", prices.get(f"{w}-{d}", prices.get(f"{d}_{w}", 0)))
                cells.append(_grid_number(cell))
            rows.append((drop, cells))
        elif isinstance(prices, list) and index < len(prices) and isinstance(prices[index], list):
            rows.append((drop, [_grid_number(p) for p in prices[index]]))
        else:
            rows.append((drop, []))

    # Sort width columns, carrying every row's prices along
    order = sorted(range(len(widths)), key=widths.__getitem__)
    widths = [widths[i] for i in order]
    rows = sorted(
        ((drop, [cells[i] for i in order if i < len(cells)]) for drop, cells in rows if drop > 0),
        key=lambda row: row[0],
    )
    if not rows:
        logger.warning("Pricing grid has no usable drop bands; ignored")
        return None
    unit = _grid_unit(raw, widths, [drop for drop, _ in rows])
    return PricingGrid(
        width_columns=widths,
        drop_rows=[GridDropRow(drop=drop, prices=cells) for drop, cells in rows],
        unit=unit,
    )


class RecordMapperService:
    """Maps raw window records to WindowTreatmentInput."""

    def __init__(self):
        self.converter = get_unit_converter()

    def pick_length(
        self,
        record: Mapping[str, Any],
        aliases: AliasList,
        unit: UnitLike,
        allow_negative: bool = False,
    ) -> Optional[float]:
        """First length found under any alias, converted to metres."""
        for key, key_unit in aliases:
            number = _to_number(key, record.get(key))
            if number is None:
                continue
            if number < 0 and not allow_negative:
                raise InvalidMeasurementError(key, number)
            return clean_length(self.converter.to_metres(number, key_unit or unit))
        return None

    def map_measurement(self, record: Mapping[str, Any], unit: UnitLike) -> Measurement:
        """Build a Measurement (metres) from raw measurement fields."""
        # Rail width and drop may be negative or missing; the calculator flags them incomplete
        rail_width = self.pick_length(record, RAIL_WIDTH_KEYS, unit, allow_negative=True)
        drop = self.pick_length(record, DROP_KEYS, unit, allow_negative=True)

        waste = pick(record, ("waste_percent", "waste_percentage", "waste"))
        fullness = pick(record, ("fullness_ratio", "fullness", "heading_fullness"))
        for key, value in (("waste_percent", waste), ("fullness_ratio", fullness)):
            if value is not None and value < 0:
                raise InvalidMeasurementError(key, value)

        panel = str(
            record.get("panel_configuration") or record.get("curtain_type") or "pair"
        ).strip().lower()
        rotated = record.get("fabric_rotated") or record.get("railroaded")
        orientation = str(record.get("orientation") or ("railroaded" if rotated else "vertical"))

        return Measurement(
            rail_width=rail_width or 0.0,
            drop=drop or 0.0,
            pooling=self.pick_length(record, POOLING_KEYS, unit) or 0.0,
            header_allowance=self.pick_length(record, HEADER_KEYS, unit),
            bottom_hem=self.pick_length(record, BOTTOM_HEM_KEYS, unit),
            side_hem=self.pick_length(record, SIDE_HEM_KEYS, unit),
            seam_hem=self.pick_length(record, SEAM_HEM_KEYS, unit),
            return_left=self.pick_length(record, RETURN_LEFT_KEYS, unit),
            return_right=self.pick_length(record, RETURN_RIGHT_KEYS, unit),
            overlap=self.pick_length(record, OVERLAP_KEYS, unit),
            waste_percent=waste,
            # Legacy records store "no fullness" as 0
            fullness_ratio=fullness if fullness else None,
            panel_configuration="single" if panel in ("single", "1", "one") else "pair",
            orientation="railroaded" if orientation.lower() == "railroaded" else "vertical",
        )

    def map_fabric(self, raw: Optional[Mapping[str, Any]], unit: UnitLike) -> Optional[FabricItem]:
        """FabricItem from a raw fabric record; None when no fabric is selected."""
        if not raw:
            return None
        price = pick(raw, PRICE_KEYS)
        width = self.pick_length(raw, FABRIC_WIDTH_KEYS, unit, allow_negative=True)
        if raw.get("id") is None and price is None and width is None:
            return None
        return FabricItem(
            id=str(raw["id"]) if raw.get("id") is not None else None,
            name=raw.get("name") or "Fabric",
            price_per_metre=price or 0.0,
            width=width or 0.0,
            vertical_repeat=self.pick_length(raw, VERTICAL_REPEAT_KEYS, unit) or 0.0,
            horizontal_repeat=self.pick_length(raw, HORIZONTAL_REPEAT_KEYS, unit) or 0.0,
            subcategory=raw.get("subcategory"),
            pricing_grid_markup=pick(raw, ("pricing_grid_markup", "grid_markup")),
            pricing_grid=map_pricing_grid(raw.get("pricing_grid_data") or raw.get("pricing_grid")),
        )

    def map_lining(self, raw: Optional[Mapping[str, Any]]) -> Optional[LiningSelection]:
        if not raw:
            return None
        lining_type = raw.get("type") or raw.get("lining_type") or raw.get("name")
        if not lining_type or str(lining_type).lower() == "none":
            return None
        return LiningSelection(
            type=str(lining_type),
            price_per_metre=pick(raw, PRICE_KEYS) or 0.0,
            labour_per_curtain=pick(raw, ("labour_per_curtain", "labor_per_curtain")) or 0.0,
        )

    def map_heading(self, raw: Optional[Mapping[str, Any]], unit: UnitLike) -> Optional[HeadingSelection]:
        if not raw or not raw.get("name"):
            return None
        fullness = pick(raw, ("fullness_ratio", "fullness"))
        return HeadingSelection(
            name=str(raw["name"]),
            fullness_ratio=fullness if fullness else None,
            extra_fabric=self.pick_length(
                raw, (("extra_fabric", None), ("extra_fabric_cm", "cm")), unit
            ) or 0.0,
            upcharge_per_metre=pick(raw, ("upcharge_per_metre", "upcharge_per_meter")) or 0.0,
            upcharge_per_curtain=pick(raw, ("upcharge_per_curtain",)) or 0.0,
        )

    def map_options(self, raw: Optional[Sequence[Mapping[str, Any]]]) -> List[TreatmentOption]:
        options: List[TreatmentOption] = []
        for entry in raw or []:
            method_name = str(entry.get("pricing_method") or "fixed").strip().lower()
            method_name = method_name.replace("_", "-").replace(" ", "-")
            method = OPTION_METHOD_ALIASES.get(method_name)
            if method is None:
                logger.warning(f"Unknown option pricing method {method_name!r}; treated as fixed")
                method = OptionPricingMethod.FIXED
            options.append(
                TreatmentOption(
                    name=str(entry.get("name") or "Option"),
                    price=pick(entry, ("price", "unit_price", "cost")) or 0.0,
                    pricing_method=method,
                    description=entry.get("description"),
                    pricing_grid=map_pricing_grid(entry.get("pricing_grid_data") or entry.get("pricing_grid")),
                )
            )
        return options

    def map_record(
        self,
        record: Mapping[str, Any],
        unit: UnitLike = "cm",
        record_id: Optional[str] = None,
    ) -> WindowTreatmentInput:
        """
        Map one raw window record.

        Args:
            record: Raw record; measurements may sit at the top level or under
                "measurements"/"measurements_details"
            unit: Length unit of un-suffixed values in the record
            record_id: Id to use when the record has none

        Returns:
            WindowTreatmentInput with every length in metres

        Raises:
            InvalidMeasurementError: an allowance is negative
            APIError: a numeric field is not a number
        """
        measurements = dict(record)
        for nested in ("measurements", "measurements_details"):
            if isinstance(record.get(nested), Mapping):
                measurements.update(record[nested])

        fabric_raw = record.get("fabric")
        if not isinstance(fabric_raw, Mapping):
            # Flat legacy rows keep fabric fields beside the measurements
            fabric_raw = {
                key: record[key]
                for key in (*PRICE_KEYS, "fabric_width", "fabric_width_cm", "fabric_width_m", "fabric_id")
                if key in record
            }
            if "fabric_id" in fabric_raw:
                fabric_raw["id"] = fabric_raw.pop("fabric_id")

        manufacturing = str(record.get("manufacturing_type") or "machine").strip().lower()
        # Grid-priced fabrics carry their pricing method on the fabric record
        pricing_method = str(
            record.get("pricing_method") or fabric_raw.get("pricing_method") or "per_metre"
        ).strip().lower()
        window_id = record.get("id") or record_id or "window"

        window = WindowTreatmentInput(
            id=str(window_id),
            name=record.get("name") or record.get("treatment_name") or "Window treatment",
            category=record.get("category") or record.get("treatment_type") or "curtains",
            subcategory=record.get("subcategory"),
            measurement=self.map_measurement(measurements, unit),
            fabric=self.map_fabric(fabric_raw, unit),
            lining=self.map_lining(record.get("lining")),
            heading=self.map_heading(record.get("heading"), unit),
            options=self.map_options(record.get("options")),
            manufacturing_type=(
                ManufacturingType.HAND if manufacturing in ("hand", "hand_finished", "hand-finished")
                else ManufacturingType.MACHINE
            ),
            pricing_method=window_pricing_method(pricing_method),
            markup_override=pick(record, ("markup_override", "markup_percentage")),
        )
        logger.debug(f"Mapped record {window.id} ({unit}) to canonical window input")
        return window


@service_factory
def get_record_mapper() -> RecordMapperService:
    """Get RecordMapperService singleton instance."""
    return RecordMapperService()


def map_record(
    record: Mapping[str, Any], unit: UnitLike = "cm", record_id: Optional[str] = None
) -> WindowTreatmentInput:
    """Module-level shortcut for RecordMapperService.map_record."""
    return get_record_mapper().map_record(record, unit, record_id)
