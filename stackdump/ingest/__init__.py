"""Stack Exchange Data Dump Ingest Pipeline.

This package downloads site dump archives, extracts them and loads every
entity file into the SQLite store.

Usage:
    python -m stackdump.ingest                        # Archives in ./data
    python -m stackdump.ingest --site-list site.list  # Sites from a manifest
"""
