"""
Pipeline functions.

Stateless orchestration between the storage services and the pure
accountability engine. Routers call these; engine functions never do I/O.
"""
