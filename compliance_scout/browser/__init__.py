"""Browser automation: session lifecycle, navigation, DOM queries."""
