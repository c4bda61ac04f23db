"""HTTP surface of the English check proxy."""
