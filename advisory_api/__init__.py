"""Advisory agreement review API."""
