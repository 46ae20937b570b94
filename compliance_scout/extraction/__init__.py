"""Page text cleaning and document extraction."""
