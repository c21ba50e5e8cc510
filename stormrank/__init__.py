"""
stormrank package
=================

Storm event harm & damage ranking over NOAA Storm Data.

- The CLI entry point is in `stormrank/cli.py`.
- The pipeline driver (normalize, filter, aggregate) is in `stormrank/pipeline.py`.
- Dataset loading is in `stormrank/loader.py`.
"""

__version__ = '0.3.0'
