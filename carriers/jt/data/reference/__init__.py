"""J&T reference data: zones, rates, and configuration."""
