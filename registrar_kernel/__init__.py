"""
Registrar kernel: exceptions, structured logging, clock, database layer and
ORM models shared by the configuration and ingestion packages.
"""

__version__ = "0.1.0"
