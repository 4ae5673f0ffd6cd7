"""Pre-processing: path data parsing and flattening into straight segments."""
