"""
Core application engine for walking the catalog and exporting it.

This package contains the primary logic. The `ExportManager` visits every
library, section, show, season, episode and movie in turn and writes the
artifacts of each node.
"""
