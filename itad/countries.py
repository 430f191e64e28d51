"""Static registry of supported European countries.

Each country carries its display name, the name variants users and
geocoders write for it (English, native, abbreviated), and a postcode
format. The registry is checked for completeness when this module is
imported, so a missing entry fails the build rather than a verification.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class RegistryError(RuntimeError):
    """Raised when the country registry is incomplete or inconsistent."""


class CountryCode(str, Enum):
    """ISO 3166-1 alpha-2 codes of supported countries."""

    AD = "AD"  # Andorra
    AL = "AL"  # Albania
    AT = "AT"  # Austria
    BA = "BA"  # Bosnia and Herzegovina
    BE = "BE"  # Belgium
    BG = "BG"  # Bulgaria
    BY = "BY"  # Belarus
    CH = "CH"  # Switzerland
    CY = "CY"  # Cyprus
    CZ = "CZ"  # Czech Republic
    DE = "DE"  # Germany
    DK = "DK"  # Denmark
    EE = "EE"  # Estonia
    ES = "ES"  # Spain
    FI = "FI"  # Finland
    FR = "FR"  # France
    GB = "GB"  # United Kingdom
    GR = "GR"  # Greece
    HR = "HR"  # Croatia
    HU = "HU"  # Hungary
    IE = "IE"  # Ireland
    IS = "IS"  # Iceland
    IT = "IT"  # Italy
    LI = "LI"  # Liechtenstein
    LT = "LT"  # Lithuania
    LU = "LU"  # Luxembourg
    LV = "LV"  # Latvia
    MC = "MC"  # Monaco
    MD = "MD"  # Moldova
    ME = "ME"  # Montenegro
    MK = "MK"  # North Macedonia
    MT = "MT"  # Malta
    NL = "NL"  # Netherlands
    NO = "NO"  # Norway
    PL = "PL"  # Poland
    PT = "PT"  # Portugal
    RO = "RO"  # Romania
    RS = "RS"  # Serbia
    RU = "RU"  # Russia
    SE = "SE"  # Sweden
    SI = "SI"  # Slovenia
    SK = "SK"  # Slovakia
    SM = "SM"  # San Marino
    TR = "TR"  # Turkey
    UA = "UA"  # Ukraine
    VA = "VA"  # Vatican City
    XK = "XK"  # Kosovo


@dataclass(slots=True, frozen=True)
class CountryInfo:
    """Registry entry for one country.

    Attributes:
        code: Country code.
        name: English display name.
        variants: Lower-case names that identify the country.
        pattern: Anchored, case-insensitive postcode pattern.
        description: Human description of the postcode format.
        example: A postcode in the documented format.
    """

    code: CountryCode
    name: str
    variants: frozenset[str]
    pattern: re.Pattern
    description: str
    example: str


def _info(
    code: CountryCode,
    name: str,
    variants: list[str],
    pattern: str,
    fmt: str,
    example: str,
) -> CountryInfo:
    return CountryInfo(
        code=code,
        name=name,
        # The code itself is always a variant ("gb", "de", ...)
        variants=frozenset([name.lower(), code.value.lower(), *variants]),
        pattern=re.compile(pattern, re.IGNORECASE),
        description=f"{fmt} (e.g. {example})",
        example=example,
    )


# =============================================================================
# Registry
# =============================================================================

# Nominatim reports countries in the local language, sometimes bilingually
# ("Suomi / Finland"), so those display forms are listed as variants too.
_ENTRIES: list[CountryInfo] = [
    _info(CountryCode.AD, "Andorra", [], r"AD\d{3}", "AD + 3 digits", "AD100"),
    _info(CountryCode.AL, "Albania", ["shqipëria", "shqiperia"],
          r"\d{4}", "4 digits", "1001"),
    _info(CountryCode.AT, "Austria", ["österreich", "osterreich", "autriche"],
          r"\d{4}", "4 digits", "1010"),
    _info(CountryCode.BA, "Bosnia and Herzegovina",
          ["bosnia", "herzegovina", "bosna i hercegovina", "босна и херцеговина",
           "bosna i hercegovina / босна и херцеговина"],
          r"\d{5}", "5 digits", "71000"),
    _info(CountryCode.BE, "Belgium",
          ["belgië", "belgie", "belgique", "belgien", "belgië / belgique / belgien"],
          r"\d{4}", "4 digits", "1000"),
    _info(CountryCode.BG, "Bulgaria", ["българия"], r"\d{4}", "4 digits", "1000"),
    _info(CountryCode.BY, "Belarus", ["беларусь", "white russia"],
          r"\d{6}", "6 digits", "220001"),
    _info(CountryCode.CH, "Switzerland",
          ["schweiz", "suisse", "svizzera", "svizra", "swiss confederation",
           "schweiz/suisse/svizzera/svizra"],
          r"\d{4}", "4 digits", "8001"),
    _info(CountryCode.CY, "Cyprus", ["κύπρος", "kıbrıs", "κύπρος - kıbrıs"],
          r"\d{4}", "4 digits", "1011"),
    _info(CountryCode.CZ, "Czech Republic",
          ["czechia", "czech", "česká republika", "česko"],
          r"\d{3}\s?\d{2}", "5 digits with optional space", "120 00"),
    _info(CountryCode.DE, "Germany",
          ["deutschland", "federal republic of germany"],
          r"\d{5}", "5 digits", "10115"),
    _info(CountryCode.DK, "Denmark", ["danmark"], r"\d{4}", "4 digits", "1000"),
    _info(CountryCode.EE, "Estonia", ["eesti"], r"\d{5}", "5 digits", "10111"),
    _info(CountryCode.ES, "Spain",
          ["españa", "espana", "reino de españa", "kingdom of spain"],
          r"\d{5}", "5 digits", "28001"),
    _info(CountryCode.FI, "Finland", ["suomi", "suomi / finland"],
          r"\d{5}", "5 digits", "00100"),
    _info(CountryCode.FR, "France", ["french republic", "république française"],
          r"\d{5}", "5 digits", "75001"),
    _info(CountryCode.GB, "United Kingdom",
          ["uk", "great britain", "britain", "england", "scotland", "wales",
           "northern ireland"],
          r"[A-Z]{1,2}\d{1,2}[A-Z]?\s?\d[A-Z]{2}",
          "outward code, optional space, inward code", "SW1A 1AA"),
    _info(CountryCode.GR, "Greece",
          ["hellas", "ελλάδα", "ελλάς", "hellenic republic"],
          r"\d{3}\s?\d{2}", "5 digits with optional space", "104 31"),
    _info(CountryCode.HR, "Croatia", ["hrvatska"], r"\d{5}", "5 digits", "10000"),
    _info(CountryCode.HU, "Hungary", ["magyarország", "magyarorszag"],
          r"\d{4}", "4 digits", "1011"),
    _info(CountryCode.IE, "Ireland",
          ["éire", "eire", "republic of ireland", "éire / ireland"],
          r"[A-Z]\d{1,2}\s?[A-Z0-9]{4}", "Eircode routing key + unique identifier",
          "D02 AF30"),
    _info(CountryCode.IS, "Iceland", ["ísland"], r"\d{3}", "3 digits", "101"),
    _info(CountryCode.IT, "Italy", ["italia", "italian republic"],
          r"\d{5}", "5 digits", "00118"),
    _info(CountryCode.LI, "Liechtenstein", ["fürstentum liechtenstein"],
          r"\d{4}", "4 digits", "9490"),
    _info(CountryCode.LT, "Lithuania", ["lietuva"],
          r"(LT-)?\d{5}", "5 digits with optional LT- prefix", "LT-01101"),
    _info(CountryCode.LU, "Luxembourg",
          ["luxemburg", "lëtzebuerg", "groussherzogtum lëtzebuerg"],
          r"(L-)?\d{4}", "4 digits with optional L- prefix", "1010"),
    _info(CountryCode.LV, "Latvia", ["latvija"],
          r"(LV-)?\d{4}", "4 digits with optional LV- prefix", "LV-1001"),
    _info(CountryCode.MC, "Monaco", ["principality of monaco"],
          r"980\d{2}", "5 digits starting 980", "98000"),
    _info(CountryCode.MD, "Moldova",
          ["republic of moldova", "moldova republic"],
          r"(MD-?)?\d{4}", "4 digits with optional MD prefix", "2001"),
    _info(CountryCode.ME, "Montenegro",
          ["crna gora", "црна гора", "црна гора / crna gora"],
          r"\d{5}", "5 digits", "81000"),
    _info(CountryCode.MK, "North Macedonia", ["macedonia", "северна македонија"],
          r"\d{4}", "4 digits", "1000"),
    _info(CountryCode.MT, "Malta", ["republic of malta"],
          r"[A-Z]{3}\s?\d{4}", "3 letters, optional space, 4 digits", "VLT 1011"),
    _info(CountryCode.NL, "Netherlands", ["holland", "nederland"],
          r"\d{4}\s?[A-Z]{2}", "4 digits, optional space, 2 letters", "1234 AB"),
    _info(CountryCode.NO, "Norway", ["norge", "noreg", "kingdom of norway"],
          r"\d{4}", "4 digits", "0001"),
    _info(CountryCode.PL, "Poland", ["polska", "republic of poland"],
          r"\d{2}-?\d{3}", "5 digits with optional dash", "00-001"),
    _info(CountryCode.PT, "Portugal", ["portuguese republic"],
          r"\d{4}-?\d{3}", "4 digits, optional dash, 3 digits", "1000-001"),
    _info(CountryCode.RO, "Romania", ["românia"], r"\d{6}", "6 digits", "010001"),
    _info(CountryCode.RS, "Serbia", ["србија", "srbija"], r"\d{5}", "5 digits", "11000"),
    _info(CountryCode.RU, "Russia",
          ["russian federation", "россия", "российская федерация"],
          r"\d{6}", "6 digits", "101000"),
    _info(CountryCode.SE, "Sweden", ["sverige", "kingdom of sweden"],
          r"\d{3}\s?\d{2}", "5 digits with optional space", "123 45"),
    _info(CountryCode.SI, "Slovenia", ["slovenija", "republic of slovenia"],
          r"(SI-)?\d{4}", "4 digits with optional SI- prefix", "1000"),
    _info(CountryCode.SK, "Slovakia", ["slovak republic", "slovensko"],
          r"\d{3}\s?\d{2}", "5 digits with optional space", "010 01"),
    _info(CountryCode.SM, "San Marino", ["republic of san marino"],
          r"4789\d", "5 digits starting 4789", "47890"),
    _info(CountryCode.TR, "Turkey", ["türkiye", "turkiye", "republic of turkey"],
          r"\d{5}", "5 digits", "34000"),
    _info(CountryCode.UA, "Ukraine", ["україна", "ukraina"],
          r"\d{5}", "5 digits", "01001"),
    _info(CountryCode.VA, "Vatican City",
          ["vatican", "holy see", "vaticano", "città del vaticano"],
          r"00120", "fixed code", "00120"),
    _info(CountryCode.XK, "Kosovo", ["kosova", "kosova / kosovo"],
          r"\d{5}", "5 digits", "10000"),
]

COUNTRY_REGISTRY: dict[CountryCode, CountryInfo] = {e.code: e for e in _ENTRIES}

# Variant -> code, built once for the normalizer
VARIANT_INDEX: dict[str, CountryCode] = {
    variant: info.code
    for info in _ENTRIES
    for variant in info.variants
}


def _check_registry() -> None:
    """Verify every code is registered once with a pattern and variants."""
    missing = [c.value for c in CountryCode if c not in COUNTRY_REGISTRY]
    if missing:
        raise RegistryError(f"Countries missing from registry: {', '.join(missing)}")
    if len(_ENTRIES) != len(COUNTRY_REGISTRY):
        raise RegistryError("Duplicate country entries in registry")

    seen: dict[str, CountryCode] = {}
    for info in _ENTRIES:
        if not info.variants or not info.pattern.pattern:
            raise RegistryError(f"Incomplete registry entry for {info.code.value}")
        for variant in info.variants:
            owner = seen.setdefault(variant, info.code)
            if owner != info.code:
                raise RegistryError(
                    f"Variant '{variant}' registered for both {owner.value} and {info.code.value}"
                )


_check_registry()


# =============================================================================
# Lookups
# =============================================================================


def country_info(code: CountryCode) -> CountryInfo:
    """Get the registry entry for a code.

    Raises:
        RegistryError: If the code is not registered (broken build).
    """
    try:
        return COUNTRY_REGISTRY[CountryCode(code)]
    except (KeyError, ValueError) as e:
        raise RegistryError(f"Unregistered country code: {code!r}") from e


def name_variants_of(code: CountryCode) -> frozenset[str]:
    return country_info(code).variants


def pattern_of(code: CountryCode) -> re.Pattern:
    return country_info(code).pattern


def country_name(code: CountryCode) -> str:
    return country_info(code).name


def all_codes() -> tuple[CountryCode, ...]:
    """All registered codes in alphabetical order."""
    return tuple(CountryCode)
