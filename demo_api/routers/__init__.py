"""Endpoint routers: FSC domain simulators and generic HTTP test utilities."""
