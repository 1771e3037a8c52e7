from .csv_parser import parse_csv

__all__ = ["parse_csv"]
