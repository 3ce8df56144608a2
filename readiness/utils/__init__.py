"""
Shared utilities: probe client, source-tree inspector and logging.
"""
