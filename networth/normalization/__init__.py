"""Normalization package."""

from networth.normalization.normalizer import (
    MAPPERS,
    RecordNormalizer,
    coerce_decimal,
    parse_decimal,
)

__all__ = ["MAPPERS", "RecordNormalizer", "coerce_decimal", "parse_decimal"]
