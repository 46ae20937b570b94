"""End-to-end scraping pipeline."""
