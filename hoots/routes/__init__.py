# Routes package init
"""
Hoots Backend — API Routes Package
===================================

Route Inventory:
    - posts.py:   /posts, /posts/{id}, /posts/{id}/comments[/{comment_id}]
    - health.py:  GET /health

Routes stay thin: they pull the session, caller and service from
dependencies and hand everything else to PostService.
"""
