"""Physics: vector math, collision queries and the flight model."""
