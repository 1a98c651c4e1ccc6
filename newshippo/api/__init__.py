"""HTTP entry layer for article ingestion, lookup and deletion."""
