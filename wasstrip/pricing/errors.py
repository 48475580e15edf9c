# wasstrip/pricing/errors.py

"""Exceptions raised by price normalisation and offer resolution."""


class PriceComparisonError(Exception):
    """Base class for data problems found while comparing prices."""


class EmptyInputError(PriceComparisonError):
    """No comparable offer exists in the given products."""


class InvalidVariantError(PriceComparisonError):
    """A variant (or product-level price) cannot be priced per wash."""
