"""UK tax constants: income tax bands, personal allowance, National Insurance.

Hardcoded Python constants versioned by tax year. Band tables are validated
when this module is imported, so a malformed table stops the process at
startup rather than inside a calculation. Alternative tables can be loaded by
name from config/band_tables.yaml.
"""

import re
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, NamedTuple

from config import load_yaml_config
from tradetax.calculators.errors import ConfigurationError, InvalidInput


class TaxRegion(str, Enum):
    """Where the taxpayer is resident for income tax."""

    ENGLAND_NI = "england"
    SCOTLAND = "scotland"
    WALES = "wales"


class EmploymentStatus(str, Enum):
    """Which income streams a taxpayer has."""

    SELF_EMPLOYED_ONLY = "self_employed"
    EMPLOYED_AND_SELF_EMPLOYED = "employed_self"
    EMPLOYED_ONLY = "employed"


class TaxBand(NamedTuple):
    """A single income tax band."""

    name: str
    rate: Decimal
    upper: Decimal | None  # absolute, assumes full personal allowance; None = no cap


TaxBandTable = tuple[TaxBand, ...]


class PersonalAllowanceRules(NamedTuple):
    """Personal allowance and the income above which it tapers away."""

    base_allowance: Decimal
    taper_threshold: Decimal  # allowance drops £1 for every £2 above this


class NicThresholds(NamedTuple):
    """Class 2 and Class 4 National Insurance on self-employment profit."""

    class2_weekly_rate: Decimal
    class2_annual_threshold: Decimal
    class4_lower_rate: Decimal
    class4_lower_threshold: Decimal
    class4_upper_threshold: Decimal
    class4_upper_rate: Decimal


class Class1Thresholds(NamedTuple):
    """Employee Class 1 National Insurance withheld through PAYE."""

    primary_threshold: Decimal
    upper_earnings_limit: Decimal
    main_rate: Decimal
    upper_rate: Decimal


class TaxYearData(NamedTuple):
    """All tax parameters for a single UK tax year."""

    personal_allowance: PersonalAllowanceRules
    bands: dict[TaxRegion, TaxBandTable]
    nic: NicThresholds
    class1: Class1Thresholds


def make_band_table(*bands: TaxBand) -> TaxBandTable:
    """Validate bands and return them as an immutable table.

    The first band is the 0% personal allowance band, finite upper bounds
    strictly increase, and exactly one band (the last) is uncapped.

    Raises:
        ConfigurationError: If any of those rules is broken.
    """
    if not bands:
        raise ConfigurationError("Band table is empty.")

    for band in bands:
        if not isinstance(band.rate, Decimal) or not Decimal("0") <= band.rate <= Decimal("1"):
            raise ConfigurationError(f"Band {band.name!r} has invalid rate {band.rate!r}.")

    if bands[0].rate != 0:
        raise ConfigurationError(
            f"First band {bands[0].name!r} must be the 0% personal allowance band."
        )

    if bands[-1].upper is not None:
        raise ConfigurationError("Last band must have no upper bound.")

    previous = Decimal("0")
    for band in bands[:-1]:
        if band.upper is None:
            raise ConfigurationError(f"Only the last band may be uncapped, not {band.name!r}.")
        if not isinstance(band.upper, Decimal) or band.upper <= previous:
            raise ConfigurationError(
                f"Band {band.name!r} upper bound {band.upper} must exceed {previous}."
            )
        previous = band.upper

    return tuple(bands)


def _decimal(value: Any, what: str) -> Decimal:
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ConfigurationError(f"Invalid {what}: {value!r}") from e


def load_band_table(name: str, filename: str = "band_tables.yaml") -> TaxBandTable:
    """Load a named band table from a YAML file in config/.

    Raises:
        ConfigurationError: If the table is missing or malformed.
    """
    tables = load_yaml_config(filename).get("band_tables", {})
    if name not in tables:
        available = ", ".join(sorted(tables)) or "none"
        raise ConfigurationError(f"Unknown band table: {name}. Available: {available}")

    bands = []
    for entry in tables[name]:
        try:
            label, rate, upper = entry["name"], entry["rate"], entry["upper"]
        except (KeyError, TypeError) as e:
            raise ConfigurationError(f"Malformed band in table {name}: {entry!r}") from e
        bands.append(
            TaxBand(
                name=str(label),
                rate=_decimal(rate, "rate"),
                upper=_decimal(upper, "upper bound") if upper is not None else None,
            )
        )
    return make_band_table(*bands)


_PERSONAL_ALLOWANCE = PersonalAllowanceRules(
    base_allowance=Decimal("12570"),
    taper_threshold=Decimal("100000"),
)

# England, Northern Ireland and Wales (unchanged 2023-24 to 2025-26)
_BANDS_REST_OF_UK = make_band_table(
    TaxBand("Personal Allowance", Decimal("0"), Decimal("12570")),
    TaxBand("Basic Rate", Decimal("0.20"), Decimal("50270")),
    TaxBand("Higher Rate", Decimal("0.40"), Decimal("125140")),
    TaxBand("Additional Rate", Decimal("0.45"), None),
)

_BANDS_SCOTLAND_2023 = make_band_table(
    TaxBand("Personal Allowance", Decimal("0"), Decimal("12570")),
    TaxBand("Starter Rate", Decimal("0.19"), Decimal("14732")),
    TaxBand("Basic Rate", Decimal("0.20"), Decimal("25688")),
    TaxBand("Intermediate Rate", Decimal("0.21"), Decimal("43662")),
    TaxBand("Higher Rate", Decimal("0.42"), Decimal("125140")),
    TaxBand("Top Rate", Decimal("0.47"), None),
)

_BANDS_SCOTLAND_2024 = make_band_table(
    TaxBand("Personal Allowance", Decimal("0"), Decimal("12570")),
    TaxBand("Starter Rate", Decimal("0.19"), Decimal("14876")),
    TaxBand("Basic Rate", Decimal("0.20"), Decimal("26561")),
    TaxBand("Intermediate Rate", Decimal("0.21"), Decimal("43662")),
    TaxBand("Higher Rate", Decimal("0.42"), Decimal("75000")),
    TaxBand("Advanced Rate", Decimal("0.45"), Decimal("125140")),
    TaxBand("Top Rate", Decimal("0.48"), None),
)

_BANDS_SCOTLAND_2025 = make_band_table(
    TaxBand("Personal Allowance", Decimal("0"), Decimal("12570")),
    TaxBand("Starter Rate", Decimal("0.19"), Decimal("15397")),
    TaxBand("Basic Rate", Decimal("0.20"), Decimal("27491")),
    TaxBand("Intermediate Rate", Decimal("0.21"), Decimal("43662")),
    TaxBand("Higher Rate", Decimal("0.42"), Decimal("75000")),
    TaxBand("Advanced Rate", Decimal("0.45"), Decimal("125140")),
    TaxBand("Top Rate", Decimal("0.48"), None),
)


def _bands(rest_of_uk: TaxBandTable, scotland: TaxBandTable) -> dict[TaxRegion, TaxBandTable]:
    return {
        TaxRegion.ENGLAND_NI: rest_of_uk,
        TaxRegion.WALES: rest_of_uk,
        TaxRegion.SCOTLAND: scotland,
    }


TAX_YEARS: dict[str, TaxYearData] = {
    "2023-24": TaxYearData(
        personal_allowance=_PERSONAL_ALLOWANCE,
        bands=_bands(_BANDS_REST_OF_UK, _BANDS_SCOTLAND_2023),
        nic=NicThresholds(
            class2_weekly_rate=Decimal("3.45"),
            class2_annual_threshold=Decimal("6725"),
            class4_lower_rate=Decimal("0.09"),
            class4_lower_threshold=Decimal("12570"),
            class4_upper_threshold=Decimal("50270"),
            class4_upper_rate=Decimal("0.02"),
        ),
        class1=Class1Thresholds(
            primary_threshold=Decimal("12570"),
            upper_earnings_limit=Decimal("50270"),
            main_rate=Decimal("0.12"),  # before the 6 January 2024 cut to 10%
            upper_rate=Decimal("0.02"),
        ),
    ),
    "2024-25": TaxYearData(
        personal_allowance=_PERSONAL_ALLOWANCE,
        bands=_bands(_BANDS_REST_OF_UK, _BANDS_SCOTLAND_2024),
        nic=NicThresholds(
            class2_weekly_rate=Decimal("3.45"),
            class2_annual_threshold=Decimal("6725"),
            class4_lower_rate=Decimal("0.06"),
            class4_lower_threshold=Decimal("12570"),
            class4_upper_threshold=Decimal("50270"),
            class4_upper_rate=Decimal("0.02"),
        ),
        class1=Class1Thresholds(
            primary_threshold=Decimal("12570"),
            upper_earnings_limit=Decimal("50270"),
            main_rate=Decimal("0.08"),
            upper_rate=Decimal("0.02"),
        ),
    ),
    "2025-26": TaxYearData(
        personal_allowance=_PERSONAL_ALLOWANCE,
        bands=_bands(_BANDS_REST_OF_UK, _BANDS_SCOTLAND_2025),
        nic=NicThresholds(
            class2_weekly_rate=Decimal("3.50"),
            class2_annual_threshold=Decimal("6845"),
            class4_lower_rate=Decimal("0.06"),
            class4_lower_threshold=Decimal("12570"),
            class4_upper_threshold=Decimal("50270"),
            class4_upper_rate=Decimal("0.02"),
        ),
        class1=Class1Thresholds(
            primary_threshold=Decimal("12570"),
            upper_earnings_limit=Decimal("50270"),
            main_rate=Decimal("0.08"),
            upper_rate=Decimal("0.02"),
        ),
    ),
}

DEFAULT_TAX_YEAR = "2024-25"


def get_tax_year(tax_year: str) -> TaxYearData:
    """Look up the parameters for a tax year key such as "2024-25".

    Raises:
        InvalidInput: If the year is not in TAX_YEARS.
    """
    try:
        return TAX_YEARS[tax_year]
    except KeyError:
        raise InvalidInput(
            f"Unknown tax year: {tax_year}. Available: {', '.join(sorted(TAX_YEARS))}"
        ) from None


def band_table_for(region: TaxRegion | str, tax_year: str = DEFAULT_TAX_YEAR) -> TaxBandTable:
    """Return the band table that applies to a region in a tax year."""
    return get_tax_year(tax_year).bands[parse_region(region)]


def parse_region(region: TaxRegion | str) -> TaxRegion:
    """Coerce a region value, raising InvalidInput for unknown ones."""
    try:
        return TaxRegion(region)
    except ValueError:
        valid = ", ".join(r.value for r in TaxRegion)
        raise InvalidInput(f"Unknown tax region: {region}. Must be one of: {valid}") from None


def parse_employment_status(status: EmploymentStatus | str) -> EmploymentStatus:
    """Coerce an employment status value, raising InvalidInput for unknown ones."""
    try:
        return EmploymentStatus(status)
    except ValueError:
        valid = ", ".join(s.value for s in EmploymentStatus)
        raise InvalidInput(
            f"Unknown employment status: {status}. Must be one of: {valid}"
        ) from None


# --- Tax-year windows ---

_YEAR_LABEL_RE = re.compile(r"^(\d{4})-(\d{2})$")


def tax_year_bounds(tax_year: str) -> tuple[date, date]:
    """Return the first and last day of a UK tax year (6 April to 5 April)."""
    match = _YEAR_LABEL_RE.match(tax_year)
    if not match or int(match.group(2)) != (int(match.group(1)) + 1) % 100:
        raise InvalidInput(f"Malformed tax year: {tax_year}. Expected e.g. 2024-25.")
    start_year = int(match.group(1))
    return date(start_year, 4, 6), date(start_year + 1, 4, 5)


def tax_year_for_date(day: date) -> str:
    """Return the tax year label a date falls in."""
    start_year = day.year if (day.month, day.day) >= (4, 6) else day.year - 1
    return f"{start_year}-{(start_year + 1) % 100:02d}"
