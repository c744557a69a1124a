"""Data sources: synthetic generators, statistics and the LabVIEW proxy."""
