"""
ETL Package

CSV decoding/encoding and bulk import of buyer leads.
"""
from src.buyerleads.etl.csv_codec import decode, encode
from src.buyerleads.etl.importer import BuyerImporter

__all__ = [
    "decode",
    "encode",
    "BuyerImporter",
]
