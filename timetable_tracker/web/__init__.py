"""HTTP layer: handlers, dependencies and routers."""
