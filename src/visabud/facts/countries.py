"""Country names, aliases and mention detection."""

import re

COUNTRY_NAMES: dict[str, str] = {
    "US": "United States",
    "UK": "United Kingdom",
    "CA": "Canada",
    "AU": "Australia",
    "DE": "Germany",
    "FR": "France",
    "JP": "Japan",
    "IN": "India",
    "AE": "United Arab Emirates",
    "ZA": "South Africa",
    "NG": "Nigeria",
    "KE": "Kenya",
    "PH": "Philippines",
    "PK": "Pakistan",
    "BD": "Bangladesh",
    "EG": "Egypt",
    "MX": "Mexico",
    "BR": "Brazil",
    "CN": "China",
    "ES": "Spain",
    "IT": "Italy",
    "NL": "Netherlands",
    "NZ": "New Zealand",
    "IE": "Ireland",
}

# Lower-case names and aliases, matched on word boundaries.
_ALIASES: dict[str, str] = {
    "united states of america": "US",
    "united states": "US",
    "america": "US",
    "usa": "US",
    "united kingdom": "UK",
    "uk": "UK",
    "great britain": "UK",
    "britain": "UK",
    "england": "UK",
    "scotland": "UK",
    "canada": "CA",
    "australia": "AU",
    "germany": "DE",
    "france": "FR",
    "japan": "JP",
    "india": "IN",
    "united arab emirates": "AE",
    "emirates": "AE",
    "uae": "AE",
    "south africa": "ZA",
    "nigeria": "NG",
    "kenya": "KE",
    "philippines": "PH",
    "pakistan": "PK",
    "bangladesh": "BD",
    "egypt": "EG",
    "mexico": "MX",
    "brazil": "BR",
    "china": "CN",
    "spain": "ES",
    "italy": "IT",
    "netherlands": "NL",
    "holland": "NL",
    "new zealand": "NZ",
    "ireland": "IE",
}

# Upper-case abbreviations, matched case-sensitively so "us" and "in" stay words.
_CODE_ALIASES: dict[str, str] = {
    "US": "US",
    "USA": "US",
    "UK": "UK",
    "GB": "UK",
    "UAE": "AE",
    "AUS": "AU",
}

DEMONYMS: dict[str, str] = {
    "american": "US",
    "british": "UK",
    "english": "UK",
    "canadian": "CA",
    "australian": "AU",
    "german": "DE",
    "french": "FR",
    "japanese": "JP",
    "indian": "IN",
    "emirati": "AE",
    "south african": "ZA",
    "nigerian": "NG",
    "kenyan": "KE",
    "filipino": "PH",
    "pakistani": "PK",
    "bangladeshi": "BD",
    "egyptian": "EG",
    "mexican": "MX",
    "brazilian": "BR",
    "chinese": "CN",
    "spanish": "ES",
    "italian": "IT",
    "dutch": "NL",
    "irish": "IE",
}

SCHENGEN_CODES = frozenset({"DE", "FR", "ES", "IT", "NL"})

_ORIGIN_CONTEXT = re.compile(
    r"(?:\bfrom|citizen of|national of|live in|living in|reside in|residing in|based in)\s+(?:the\s+)?$"
)


def country_name(code: str) -> str:
    """Return the display name for a country code (the code itself if unknown)."""
    return COUNTRY_NAMES.get(code.upper(), code)


def country_code(value: str | None) -> str | None:
    """Resolve a name, alias, demonym or code to a country code."""
    if not value:
        return None
    raw = value.strip()
    if raw.isupper() and raw in COUNTRY_NAMES:
        return raw
    if raw in _CODE_ALIASES:
        return _CODE_ALIASES[raw]
    lowered = raw.lower()
    if lowered in _ALIASES:
        return _ALIASES[lowered]
    if lowered in DEMONYMS:
        return DEMONYMS[lowered]
    for name_code, name in COUNTRY_NAMES.items():
        if name.lower() == lowered:
            return name_code
    return None


def normalize_country(value: str | None) -> str | None:
    """Canonical country name for any alias, or the trimmed input if unknown."""
    if not value or not value.strip():
        return None
    code = country_code(value)
    if code is None:
        return value.strip().title()
    return COUNTRY_NAMES[code]


def find_country_mentions(text: str) -> list[tuple[int, str]]:
    """All (position, code) country mentions in order of appearance."""
    lowered = text.lower()
    hits: list[tuple[int, str]] = []

    for alias, code in _ALIASES.items():
        for match in re.finditer(rf"\b{re.escape(alias)}\b", lowered):
            hits.append((match.start(), code))

    for alias, code in _CODE_ALIASES.items():
        for match in re.finditer(rf"\b{re.escape(alias)}\b", text):
            hits.append((match.start(), code))

    hits.sort(key=lambda hit: hit[0])
    return hits


def find_countries(text: str) -> list[str]:
    """Country codes mentioned in the text, deduplicated, in order."""
    seen: list[str] = []
    for _, code in find_country_mentions(text):
        if code not in seen:
            seen.append(code)
    return seen


def find_destination(text: str) -> str | None:
    """First mentioned country that is not introduced as an origin.

    "I'm from India and want to study in Canada" yields CA.
    """
    lowered = text.lower()
    for position, code in find_country_mentions(text):
        if _ORIGIN_CONTEXT.search(lowered[max(0, position - 24):position]):
            continue
        return code
    return None
