"""Book API: a Basic-auth protected CRUD service for books."""

__version__ = "0.1.0"
