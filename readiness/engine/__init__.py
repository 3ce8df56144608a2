"""
Assessment engines: load testing, probe battery, aggregation and orchestration.
"""
