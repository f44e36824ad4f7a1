# Process-wide shared state
