"""HTTP boundary and page rendering."""
