"""Core wiring: settings, constants, lifespan, exception handlers, rate limiter."""
