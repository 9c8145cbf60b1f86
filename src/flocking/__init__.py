"""Multi-flock boids simulation core."""
