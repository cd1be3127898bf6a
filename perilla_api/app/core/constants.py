"""Shared constants: error messages and pagination bounds."""

ERR_ACCESS_DENIED = "Access denied"
ERR_INVALID_REQUEST = "Invalid request"
ERR_NOT_FOUND = "Not found"
ERR_ENTRY_NOT_FOUND = "Entry not found"

MAX_PAGINATION_LIMIT = 50

# Entry created by ``perilla init``; it is granted system admin rights.
ADMINISTRATOR_ID = "Administrator"
ADMINISTRATOR_EMAIL = "admin@perilla.js.org"
