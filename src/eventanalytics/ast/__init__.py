"""SQL abstract syntax tree, builder and visitors."""
