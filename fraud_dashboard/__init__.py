"""
Fraud monitoring dashboard API backed by Snowflake.
"""

__version__ = "0.1.0"
