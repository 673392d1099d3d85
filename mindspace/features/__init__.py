"""
Features Module - Self-contained feature units.

- database: Supabase repositories for entries and patterns
- journaling: entry lifecycle, enrichment, analytics and patterns
"""
