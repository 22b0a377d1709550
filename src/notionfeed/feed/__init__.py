"""Feed assembly: board catalog, grouping and the loading pipeline."""
