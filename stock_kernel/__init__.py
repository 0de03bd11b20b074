"""
stock_kernel -- domain value objects and infrastructure for the stock ledger.

Holds the catalog (Product, Batch), the source record variants, Money,
the injectable Clock, date parsing, typed exceptions and structured
logging.  Imports nothing from the other project packages.
"""
