"""SVG tokenizing, legacy conversion and rendering."""
