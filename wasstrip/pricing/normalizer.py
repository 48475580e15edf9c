# wasstrip/pricing/normalizer.py

"""Price and pack-size normalisation to a per-wash unit cost."""

import math
import re

from wasstrip.pricing.errors import InvalidVariantError

# "€ 1.234,56", "12,80", "12.80", "€9"
_PRICE_RE = re.compile(r"\d+(?:[.,]\d+)*")

# "2 x 30 strips", "3× 20 wasbeurten"
_MULTI_PACK_RE = re.compile(
    r"(\d+)\s*[x×]\s*(\d+)\s*(?:wasbeurten|wasbeurt|strips|stuks|washes)",
    re.IGNORECASE,
)

_WASH_RE = re.compile(
    r"(\d+)\s*(?:wasbeurten|wasbeurt|washes)", re.IGNORECASE,
)

_PACK_RE = re.compile(r"(\d+)\s*(?:strips|stuks)", re.IGNORECASE)

_STUK_RE = re.compile(r"(\d+)\s*[Ss]tuks?\b")


def compute_price_per_wash(price: float, wash_count: int) -> float:
    """Return *price* divided by *wash_count*.

    Raises:
        InvalidVariantError: the wash count is not positive, the price is
            negative, or either value is not a finite number.
    """
    if not math.isfinite(price):
        raise InvalidVariantError(f"price is not a finite number: {price!r}")
    if price < 0:
        raise InvalidVariantError(f"negative price: {price}")
    if wash_count <= 0:
        raise InvalidVariantError(
            f"wash count must be positive, got {wash_count}"
        )
    return price / wash_count


def parse_price(text: str | None) -> float:
    """Extract a euro amount from storefront text like '€ 1.234,56'.

    When both separators occur the last one is the decimal mark; a lone
    comma or dot is treated as decimal.  Returns ``0.0`` when no number is
    present.
    """
    if not text:
        return 0.0
    match = _PRICE_RE.search(text)
    if not match:
        return 0.0
    raw = match.group(0)
    if "," in raw and "." in raw:
        if raw.rfind(",") > raw.rfind("."):
            raw = raw.replace(".", "").replace(",", ".")
        else:
            raw = raw.replace(",", "")
    else:
        raw = raw.replace(",", ".")
        # "1.234.567" style grouping with a single separator kind
        if raw.count(".") > 1:
            raw = raw.replace(".", "")
    return float(raw)


def parse_wash_count(
    text: str | None, default: int | None = None,
) -> int | None:
    """Extract the number of washes a pack covers from its description.

    Multi-packs ("2 x 30 strips") are multiplied out.  An explicit wash
    count wins over a strip or piece count, so "60 strips (120 wasbeurten)"
    yields 120.  Returns *default* when no pack size is found.
    """
    if not text:
        return default
    multi = _MULTI_PACK_RE.search(text)
    if multi:
        return int(multi.group(1)) * int(multi.group(2))
    for pattern in (_WASH_RE, _PACK_RE):
        single = pattern.search(text)
        if single:
            return int(single.group(1))
    return default


def normalize_variant_name(name: str) -> str:
    """Rewrite 'N Stuk(s)' to 'N Pack(s)' in a variant name."""

    def _replace(match: re.Match[str]) -> str:
        count = int(match.group(1))
        suffix = "s" if count > 1 else ""
        return f"{match.group(1)} Pack{suffix}"

    return _STUK_RE.sub(_replace, name)
