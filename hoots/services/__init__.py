# Services package init
"""
Hoots Backend — Services Layer
===============================

What:  Business logic between routes (HTTP) and the database (persistence).

Service Inventory:
    - PostService: posts and embedded comments, ownership rules, validation
"""
