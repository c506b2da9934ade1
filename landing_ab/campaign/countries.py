"""Countries that can be targeted by a geo campaign."""

from __future__ import annotations

from typing import Dict, Iterable, List

COUNTRY_NAMES: Dict[str, str] = {
    "US": "United States", "CA": "Canada", "GB": "United Kingdom",
    "DE": "Germany", "FR": "France", "ES": "Spain", "IT": "Italy",
    "NL": "Netherlands", "SE": "Sweden", "NO": "Norway", "DK": "Denmark",
    "FI": "Finland", "IE": "Ireland", "PT": "Portugal", "PL": "Poland",
    "CZ": "Czechia", "AT": "Austria", "CH": "Switzerland", "BE": "Belgium",
    "RU": "Russia", "UA": "Ukraine", "RO": "Romania", "HU": "Hungary",
    "BG": "Bulgaria", "GR": "Greece", "TR": "Turkey",
    "IN": "India", "BD": "Bangladesh", "PK": "Pakistan", "LK": "Sri Lanka",
    "NP": "Nepal", "CN": "China", "JP": "Japan", "KR": "South Korea",
    "SG": "Singapore", "MY": "Malaysia", "TH": "Thailand", "VN": "Vietnam",
    "ID": "Indonesia", "PH": "Philippines", "AU": "Australia",
    "NZ": "New Zealand", "AE": "United Arab Emirates", "SA": "Saudi Arabia",
    "QA": "Qatar", "KW": "Kuwait", "BH": "Bahrain", "OM": "Oman",
    "EG": "Egypt", "ZA": "South Africa", "NG": "Nigeria", "KE": "Kenya",
    "MA": "Morocco", "TN": "Tunisia", "DZ": "Algeria",
    "MX": "Mexico", "BR": "Brazil", "AR": "Argentina", "CL": "Chile",
    "CO": "Colombia", "PE": "Peru", "UY": "Uruguay",
}


def supported_codes(codes: Iterable[str]) -> List[str]:
    """Return the known codes in ``codes``, uppercased, order preserved."""
    seen: List[str] = []
    for code in codes:
        norm = str(code).strip().upper()
        if norm in COUNTRY_NAMES and norm not in seen:
            seen.append(norm)
    return seen


def format_country_codes(codes: Iterable[str]) -> List[str]:
    """Render codes as ``Name (CC)``; unknown codes are returned verbatim."""
    out = []
    for code in codes:
        name = COUNTRY_NAMES.get(code)
        out.append(f"{name} ({code})" if name else code)
    return out


__all__ = ["COUNTRY_NAMES", "supported_codes", "format_country_codes"]
