"""Demo API Endpoints: mock financial-services and HTTP test utility APIs."""

__version__ = "1.0.0"
