"""
Registration ETL: source adapters, the pure transform domain and the
services that extract, load and register students.
"""
