# Routes package init
"""
BookClub Backend — API Routes Package
======================================

Route Inventory:
    - members.py:  POST /members, POST /members/login,
                   GET|PUT|DELETE /members/mine, GET /members/{username}
    - follows.py:  POST|DELETE /members/{username}/follow,
                   GET /members/{username}/followers|followings
    - books.py:    POST|GET /books, GET /books/{id},
                   POST|DELETE /books/{id}/favorite, GET /books/favorites
    - reviews.py:  POST|GET /books/{id}/reviews, GET|PUT|DELETE /reviews/{id},
                   POST|GET /reviews/{id}/comments, DELETE /comments/{id}
    - health.py:   GET /health

Routes stay thin: parse the request, call a service, wrap the result in
GenericResponse. Failures propagate as exceptions to the global handlers.
"""
