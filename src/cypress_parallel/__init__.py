"""cypress-parallel: discover Cypress specs and split them into runner groups."""

__version__ = "0.1.0"
