"""
Core: settings, error taxonomy, driver resolution, pools, registry, health.
"""
