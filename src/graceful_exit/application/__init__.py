"""Application layer: ports and use cases of the shutdown coordinator."""
