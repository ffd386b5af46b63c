"""Services package - article store and ingestion."""
