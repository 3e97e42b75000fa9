"""Domain layer: report records, the comparison engine and error types."""
