"""Book catalog service.

A FastAPI application managing a catalog of books stored in a relational
table: paginated listing, editing, creation and deletion.
"""

__version__ = "0.1.0"
