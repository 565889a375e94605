"""Phone number normalization.

Two independent formatters, matching the two input widgets the SPAs use:

* Kazakhstan/Russia: always country code 7, fixed ``+7 (XXX) XXX-XX-XX`` mask.
* International: calling code picked from ``COUNTRIES``; the national number
  is re-derived when the country changes.

Whatever is displayed, code downstream only ever sees digit strings: empty,
or a complete national number prefixed with the calling-code digits.
"""

import re
from dataclasses import dataclass
from typing import Optional

_NON_DIGITS = re.compile(r"\D")

KZ_COUNTRY_DIGIT = "7"
KZ_PHONE_LENGTH = 11  # 7 + 10 national digits


def extract_digits(value: Optional[str]) -> str:
    """Strip everything but digits."""
    return _NON_DIGITS.sub("", value or "")


# ============================================================================
# KAZAKHSTAN / RUSSIA
# ============================================================================


def _kz_digits(raw: Optional[str]) -> str:
    digits = extract_digits(raw)
    if digits.startswith("8"):
        digits = KZ_COUNTRY_DIGIT + digits[1:]
    if not digits.startswith(KZ_COUNTRY_DIGIT):
        digits = KZ_COUNTRY_DIGIT + digits
    return digits[:KZ_PHONE_LENGTH]


def format_phone_value(raw: Optional[str]) -> str:
    """Render any input progressively as ``+7 (XXX) XXX-XX-XX``.

    A leading trunk ``8`` becomes ``7``; a missing ``7`` is prepended; extra
    digits are dropped. ``"87771234567"`` -> ``"+7 (777) 123-45-67"``.
    """
    d = _kz_digits(raw)

    result = "+7"
    if len(d) > 1:
        result += " (" + d[1:4]
    if len(d) >= 4:
        result += ") "
    if len(d) > 4:
        result += d[4:7]
    if len(d) > 7:
        result += "-" + d[7:9]
    if len(d) > 9:
        result += "-" + d[9:11]
    return result


def normalize_kz_phone(raw: Optional[str]) -> str:
    """Complete 11-digit number starting with 7, or ``""`` if incomplete."""
    if not extract_digits(raw):
        return ""
    digits = _kz_digits(raw)
    return digits if len(digits) == KZ_PHONE_LENGTH else ""


def caret_after_digits(formatted: str, digit_count: int) -> int:
    """Position just after the ``digit_count``-th digit of ``formatted``.

    Clients count the digits left of the caret before re-formatting and use
    this to put the caret back in the same logical place.
    """
    if digit_count <= 0:
        return 0
    seen = 0
    for index, char in enumerate(formatted):
        if char.isdigit():
            seen += 1
            if seen == digit_count:
                return index + 1
    return len(formatted)


# ============================================================================
# INTERNATIONAL
# ============================================================================


@dataclass(frozen=True)
class Country:
    code: str
    dial: str
    name: str
    mask: str  # X marks a national digit

    @property
    def dial_digits(self) -> str:
        return extract_digits(self.dial)

    @property
    def national_length(self) -> int:
        return self.mask.count("X")


COUNTRIES: tuple[Country, ...] = (
    Country("KZ", "+7", "Казахстан", "(XXX) XXX-XX-XX"),
    Country("RU", "+7", "Россия", "(XXX) XXX-XX-XX"),
    Country("UZ", "+998", "Узбекистан", "XX XXX-XX-XX"),
    Country("KG", "+996", "Кыргызстан", "XXX XXX-XXX"),
    Country("TJ", "+992", "Таджикистан", "XX XXX-XXXX"),
    Country("TM", "+993", "Туркменистан", "XX XX-XX-XX"),
    Country("AZ", "+994", "Азербайджан", "XX XXX-XX-XX"),
    Country("GE", "+995", "Грузия", "XXX XX-XX-XX"),
    Country("AM", "+374", "Армения", "XX XXX-XXX"),
    Country("BY", "+375", "Беларусь", "XX XXX-XX-XX"),
    Country("UA", "+380", "Украина", "XX XXX-XX-XX"),
    Country("MD", "+373", "Молдова", "XX XXX-XXX"),
    Country("TR", "+90", "Турция", "XXX XXX XX XX"),
    Country("AE", "+971", "ОАЭ", "XX XXX XXXX"),
    Country("SA", "+966", "Саудовская Аравия", "XX XXX XXXX"),
    Country("US", "+1", "США", "(XXX) XXX-XXXX"),
    Country("GB", "+44", "Великобритания", "XXXX XXXXXX"),
    Country("DE", "+49", "Германия", "XXX XXXXXXXX"),
    Country("FR", "+33", "Франция", "X XX XX XX XX"),
    Country("IT", "+39", "Италия", "XXX XXX XXXX"),
    Country("ES", "+34", "Испания", "XXX XXX XXX"),
    Country("PL", "+48", "Польша", "XXX XXX XXX"),
    Country("CN", "+86", "Китай", "XXX XXXX XXXX"),
    Country("JP", "+81", "Япония", "XX XXXX XXXX"),
    Country("KR", "+82", "Южная Корея", "XX XXXX XXXX"),
    Country("IN", "+91", "Индия", "XXXXX XXXXX"),
    Country("BR", "+55", "Бразилия", "XX XXXXX-XXXX"),
    Country("MX", "+52", "Мексика", "XX XXXX XXXX"),
    Country("CA", "+1", "Канада", "(XXX) XXX-XXXX"),
    Country("AU", "+61", "Австралия", "XXX XXX XXX"),
    Country("IL", "+972", "Израиль", "XX XXX XXXX"),
    Country("EG", "+20", "Египет", "XX XXXX XXXX"),
    Country("NG", "+234", "Нигерия", "XXX XXX XXXX"),
    Country("ZA", "+27", "ЮАР", "XX XXX XXXX"),
    Country("TH", "+66", "Таиланд", "XX XXX XXXX"),
    Country("ID", "+62", "Индонезия", "XXX XXXX XXXX"),
    Country("MY", "+60", "Малайзия", "XX XXX XXXX"),
    Country("SG", "+65", "Сингапур", "XXXX XXXX"),
    Country("PH", "+63", "Филиппины", "XXX XXX XXXX"),
    Country("VN", "+84", "Вьетнам", "XX XXX XX XX"),
    Country("PK", "+92", "Пакистан", "XXX XXXXXXX"),
    Country("BD", "+880", "Бангладеш", "XXXX XXXXXX"),
    Country("AR", "+54", "Аргентина", "XX XXXX-XXXX"),
    Country("CL", "+56", "Чили", "X XXXX XXXX"),
    Country("CO", "+57", "Колумбия", "XXX XXX XXXX"),
    Country("PE", "+51", "Перу", "XXX XXX XXX"),
)

_BY_CODE = {country.code: country for country in COUNTRIES}
DEFAULT_COUNTRY = COUNTRIES[0]


def get_country(code: Optional[str]) -> Country:
    """Look up a country by ISO code; unknown codes fall back to Kazakhstan."""
    return _BY_CODE.get((code or "").upper(), DEFAULT_COUNTRY)


def search_countries(query: str) -> list[Country]:
    """Filter the picker by name, dial code or ISO code."""
    if not query:
        return list(COUNTRIES)
    needle = query.lower()
    return [
        c
        for c in COUNTRIES
        if needle in c.name.lower() or query in c.dial or needle in c.code.lower()
    ]


def national_number(full: Optional[str], country_code: Optional[str]) -> str:
    """Digits after the calling code (the whole input if it lacks the code)."""
    country = get_country(country_code)
    digits = extract_digits(full)
    if digits.startswith(country.dial_digits):
        return digits[len(country.dial_digits):]
    return digits


def compose_international(national: Optional[str], country_code: Optional[str]) -> str:
    """Calling code + national digits, or ``""`` unless the length is right."""
    country = get_country(country_code)
    digits = extract_digits(national)
    if len(digits) != country.national_length:
        return ""
    return country.dial_digits + digits


def switch_country(
    full: Optional[str], old_code: Optional[str], new_code: Optional[str]
) -> str:
    """Move a number to another country, keeping the national part.

    Returns ``""`` when the national part does not fit the new country.
    """
    return compose_international(national_number(full, old_code), new_code)


def format_international(full: Optional[str], country_code: Optional[str]) -> str:
    """Display form: ``+<dial> <national digits laid into the mask>``."""
    country = get_country(country_code)
    national = national_number(full, country_code)
    if not national:
        return country.dial

    out: list[str] = []
    remaining = iter(national)
    pending = ""
    for char in country.mask:
        if char == "X":
            digit = next(remaining, None)
            if digit is None:
                break
            out.append(pending + digit)
            pending = ""
        else:
            pending += char
    return f"{country.dial} {''.join(out)}"
