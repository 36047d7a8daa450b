"""VT5 data-readiness library: weather normalisation, ids and preloadable indexes."""
