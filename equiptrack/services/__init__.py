"""
Service layer: status derivation, aggregation, search, movement
application, the inventory snapshot and the SQL/photo backends.
"""
