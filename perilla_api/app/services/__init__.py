"""
Service layer.

Each service encapsulates the queries for one record type and is
bound to the ``Database`` of the running application.  Services are
created once per application by ``AppContext`` and reached from the
API handlers through dependencies; they hold no state of their own
between calls.
"""
