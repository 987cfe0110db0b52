# Services package init
"""
BookClub Backend — Services Layer
==================================

What:  Business logic between routes (HTTP) and the database.
How:   Each service is a stateless class with a module-level singleton; the
       request's AsyncSession is passed into every call.

Service Inventory:
    - security:          bcrypt password hashing, JWT issue/verify
    - AuthService:       join, login, authenticate, password re-confirmation
    - MemberService:     member store (lookup, create, modify, delete, profile)
    - FollowService:     follow / unfollow / follower and following lists
    - BookService:       book catalog
    - FavoriteService:   favorite / unfavorite / my favorites
    - ReviewService:     reviews and review comments
"""
