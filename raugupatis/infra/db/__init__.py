"""
Database layer: engine, models, repositories and SQL migrations.
"""
