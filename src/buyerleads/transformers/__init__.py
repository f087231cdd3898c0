"""
Transformers Package

Normalization of raw input values into canonical codes.
"""
from src.buyerleads.transformers.field_normalizer import FieldNormalizer

__all__ = ["FieldNormalizer"]
