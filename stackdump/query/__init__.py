"""Read loaded tables back as typed records.

Usage:
    python -m stackdump.query acme_Post --limit 5
"""
